from __future__ import annotations
from typing import Optional

# werkzeug PBKDF2 is the current scheme; bcrypt only verifies hashes imported
# from the previous system ($2a$ / $2b$ / $2y$)
import bcrypt
from werkzeug.security import check_password_hash, generate_password_hash

MIN_PASSWORD_LENGTH = 6


def is_bcrypt_hash(h: Optional[str]) -> bool:
    return isinstance(h, str) and h.startswith(("$2a$", "$2b$", "$2y$"))


def hash_password(password: str) -> str:
    return generate_password_hash(password or "", method="pbkdf2:sha256", salt_length=16)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """
    bcrypt hashes are checked with bcrypt (legacy accounts),
    everything else with werkzeug PBKDF2.
    """
    if not password_hash:
        return False

    if is_bcrypt_hash(password_hash):
        try:
            return bcrypt.checkpw((password or "").encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False

    try:
        return check_password_hash(password_hash, password or "")
    except ValueError:
        return False


def needs_rehash(password_hash: Optional[str]) -> bool:
    return is_bcrypt_hash(password_hash)
