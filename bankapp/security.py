"""
Password hashing.

Passwords are never stored in plaintext. Hashing goes through passlib's
CryptContext, with Argon2id as the default scheme (memory-hard and
time-hard, so GPU cracking is expensive).

The service layer does not import these functions directly; it receives a
hasher (and the authentication adapter a verifier) through its constructor,
defaulting to the ones below. Tests can inject a cheaper context.
"""

from passlib.context import CryptContext

from bankapp.config import settings


pwd_context = CryptContext(schemes=settings.PASSWORD_SCHEMES, deprecated="auto")


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password with the active scheme.

    Returns:
        A hash string such as "$argon2id$v=19$m=65536,t=3,p=4$...".
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a stored hash.

    A malformed or unrecognized hash verifies as False rather than raising.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False
