"""Team member password hashing (passlib + bcrypt)."""

from passlib.context import CryptContext

MIN_PASSWORD_LENGTH = 6

_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain: str) -> str:
    if len(plain) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return _ctx.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    # Members created without a password cannot log in
    if not hashed:
        return False
    return _ctx.verify(plain, hashed)
