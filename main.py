import argparse
import logging
import os
import sys
from datetime import datetime

from rich import print
from rich.logging import RichHandler

from autocrypt_header.config import load_settings
from autocrypt_header.diagnostics import CollectingSink
from autocrypt_header.errors import AutocryptError
from autocrypt_header.message import MessageAccessor
from autocrypt_header.operations import get_valid_autocrypt_header, has_autocrypt_header
from autocrypt_header.peer_update import build_peer_update
from autocrypt_header.provider import provider_from_settings
from autocrypt_header.serializer import serialize


def setup_logging(level: str):
    logging.basicConfig(level=level, format='%(message)s', datefmt='[%X]',
                        handlers=[RichHandler(show_path=False)])


def pretty_print_result(message, record, update, sink):
    print('\n[bold underline]Message[/bold underline]')
    print(f"From: {message.get_from_address()}")
    print(f"Date: {message.get_sent_date()}")
    print(f"Internal date: {message.get_internal_date()}")
    print(f"Autocrypt headers: {len(message.get_header_values('Autocrypt'))}")

    print('\n[bold underline]Autocrypt[/bold underline]')
    if record is None:
        print('[yellow]No usable Autocrypt header.[/yellow]')
    else:
        print(f"addr: {record.address}")
        print(f"key: {len(record.key_data)} bytes")
        print(f"prefer-encrypt: {'mutual' if record.prefer_encrypt_mutual else 'nopreference'}")
        for name, value in record.extension_parameters.items():
            print(f"{name}: {value}")

    if update is not None:
        print(f"\n[green]Peer update for {update.peer_address} effective {update.effective_date.isoformat()}[/green]")

    if sink.entries:
        print('\nRejected:')
        for reason, detail in sink.entries:
            print(f" - {reason.value}: {detail}")


def cmd_inspect(args, settings):
    if not os.path.exists(args.message_file):
        print(f"[red]Error:[/red] message file not found: {args.message_file}")
        return 2

    internal_date = None
    if args.internal_date:
        try:
            internal_date = datetime.fromisoformat(args.internal_date)
        except ValueError:
            print(f"[red]Error:[/red] invalid --internal-date {args.internal_date!r}")
            return 2

    message = MessageAccessor.from_file(args.message_file, internal_date=internal_date)
    sink = CollectingSink()
    record = get_valid_autocrypt_header(message, sink) if has_autocrypt_header(message) else None
    update = None
    if record is not None:
        sent_date, received = message.get_sent_date(), message.get_internal_date()
        if sent_date is None and received is None:
            print('[yellow]Warning:[/yellow] message carries no date; cannot build a peer update.')
        else:
            update = build_peer_update(record, message.get_from_address(), sent_date, received, sink)

    pretty_print_result(message, record, update, sink)

    if args.submit and update is not None:
        if not settings.provider_url:
            print('[yellow]Warning:[/yellow] no provider_url configured; update not submitted.')
        else:
            # the CLI exits right away, so give the background send its timeout to finish
            provider_from_settings(settings).submit_peer_update(update).join(settings.provider_timeout)
    return 0


def cmd_header(args, settings):
    try:
        with open(args.key_file, 'rb') as f:
            key_data = f.read()
    except OSError as e:
        print(f"[red]Error:[/red] cannot read key file: {e}")
        return 2
    if not key_data:
        print('[red]Error:[/red] key file is empty')
        return 2
    sys.stdout.write(serialize(args.addr, key_data, args.mutual).unwrap())
    sys.stdout.write('\n')
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Autocrypt header tool')
    parser.add_argument('--config', help='Path to JSON config file (optional)', default=None)
    parser.add_argument('--log-level', help='Override the configured log level', default=None)
    sub = parser.add_subparsers(dest='command', required=True)

    inspect = sub.add_parser('inspect', help='Show the Autocrypt header and peer update of a message')
    inspect.add_argument('message_file', help='Path to raw message (.eml) file')
    inspect.add_argument('--internal-date', help='Receipt time (ISO 8601); defaults to newest Received date')
    inspect.add_argument('--submit', help='Submit the peer update to the configured provider', action='store_true')

    header = sub.add_parser('header', help='Print an Autocrypt header for outgoing mail')
    header.add_argument('--addr', required=True, help='Sender address')
    header.add_argument('--key-file', required=True, help='Path to binary public key')
    header.add_argument('--mutual', help='Set prefer-encrypt=mutual', action='store_true')
    args = parser.parse_args()

    try:
        settings = load_settings(args.config)
    except AutocryptError as e:
        print(f"[red]Config error:[/red] {e}")
        sys.exit(2)
    setup_logging(args.log_level.upper() if args.log_level else settings.log_level)

    if args.command == 'inspect':
        sys.exit(cmd_inspect(args, settings))
    sys.exit(cmd_header(args, settings))
