"""
Password hashing and session token helpers
"""
import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """False for wrong passwords and for hashes passlib can't identify"""
    if not password_hash or pwd_context.identify(password_hash) is None:
        return False
    return pwd_context.verify(password, password_hash)


def generate_session_token() -> str:
    """Opaque bearer token for a login session"""
    return secrets.token_urlsafe(32)
