"""ID generators (auto document ids)."""

import secrets
import string

AUTO_ID_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
AUTO_ID_LENGTH = 20


def generate_document_id() -> str:
    """Generate a random 20-character alphanumeric document id.

    62 symbols over 20 positions; collisions are negligible for any
    realistic number of ids.

    Returns:
        A new document id string.
    """
    return "".join(secrets.choice(AUTO_ID_ALPHABET) for _ in range(AUTO_ID_LENGTH))
