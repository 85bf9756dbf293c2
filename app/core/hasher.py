import logging

import bcrypt

from app.core.config import settings

logger = logging.getLogger(__name__)


class PasswordHelper:
    """bcrypt hashing with the cost factor taken from settings."""

    @staticmethod
    def hash_password(password: str) -> str:
        salt = bcrypt.gensalt(rounds=settings.password_hash_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def check_password(password: str, hashed_password: str) -> bool:
        """False for a wrong password and for a stored value that is not a bcrypt hash."""
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), hashed_password.encode("utf-8")
            )
        except ValueError:
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False

    @staticmethod
    def needs_rehash(hashed_password: str) -> bool:
        """True when the hash was made with a different cost than configured."""
        # $2b$<cost>$<salt+hash>
        parts = hashed_password.split("$")
        if len(parts) < 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) != settings.password_hash_rounds
