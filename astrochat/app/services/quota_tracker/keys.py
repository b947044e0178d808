"""Identity key derivation."""

import hashlib

from astrochat.app.exceptions import IdentityValidationError

KEY_SEPARATOR = "_"


def resolve_key(first_name: str, date_of_birth: str) -> str:
    """Derive the identity key for a person.

    The first name is stripped and lowercased, joined to the date of birth
    with an underscore, and hashed with SHA-256. The same person therefore
    maps to the same row regardless of how they capitalize their name.

    Args:
        first_name: Person's first name
        date_of_birth: Date of birth, YYYY-MM-DD

    Returns:
        64 character hex digest

    Raises:
        IdentityValidationError: If either value is empty
    """
    name = (first_name or "").strip().lower()
    dob = (date_of_birth or "").strip()
    if not name or not dob:
        raise IdentityValidationError()
    combined = f"{name}{KEY_SEPARATOR}{dob}"
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()
