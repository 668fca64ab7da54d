import secrets
import hashlib
from passlib.context import CryptContext

MIN_PASSWORD_LENGTH = 6
MAX_USERNAME_LENGTH = 150

pwd_ctx = CryptContext(schemes=['bcrypt'], deprecated='auto')

def hash_password(password: str) -> str:
    return pwd_ctx.hash(password)

def verify_password(password: str, hashed_password: str) -> bool:
    # passlib compares digests in constant time
    return pwd_ctx.verify(password, hashed_password)

def dummy_verify() -> None:
    """Spend the same bcrypt work as a real verify when there is no user to check against."""
    pwd_ctx.dummy_verify()

def generate_session_token() -> str:
    # 384-bit random token, URL-safe
    return secrets.token_urlsafe(48)

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()
