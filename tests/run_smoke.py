import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from autocrypt_header.message import MessageAccessor
from autocrypt_header.operations import add_autocrypt_header_to_message, peer_update_if_present


def main():
    message = MessageAccessor.from_file(ROOT / 'sample_messages' / 'autocrypt_sample.eml')
    update = peer_update_if_present(message)

    ok = True
    if update is None:
        print('ERROR: expected a peer update from the sample message')
        return 2

    if update.peer_address != 'alice@example.org':
        print('ERROR: unexpected peer address', update.peer_address)
        ok = False

    if not update.prefer_encrypt_mutual:
        print('ERROR: expected prefer-encrypt=mutual')
        ok = False

    if update.effective_date != message.get_sent_date():
        print('ERROR: expected the Date header to be the effective date')
        ok = False

    outgoing = MessageAccessor.from_string('From: bob@example.net\nDate: Tue, 14 Oct 2025 12:00:00 +0000\n\nok\n')
    add_autocrypt_header_to_message(outgoing, update.key_data, 'bob@example.net', False)
    reply = peer_update_if_present(MessageAccessor.from_string(outgoing.as_string()))
    if reply is None or reply.key_data != update.key_data:
        print('ERROR: generated header did not parse back')
        ok = False

    if ok:
        print('Smoke test passed')
        return 0
    else:
        print('Smoke test FAILED')
        return 2


if __name__ == '__main__':
    raise SystemExit(main())
