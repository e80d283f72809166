import logging
import os

from dotenv import load_dotenv
from passlib.context import CryptContext

load_dotenv()

logger = logging.getLogger(__name__)

# JWT settings
DEFAULT_SECRET_KEY = "super_secret_random_key_CHANGE_THIS"
SECRET_KEY = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
ALGORITHM = "HS256"
# 30 days
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 30))

if SECRET_KEY == DEFAULT_SECRET_KEY:
    logger.warning("SECRET_KEY is not set; tokens are signed with the built-in development key")

# Argon2 only; hashes from other schemes would be flagged as deprecated
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a login attempt against the stored hash. Malformed hashes never match."""
    try:
        return pwd_context.verify(plain_password, password_hash)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
