"""Encryption of stored passwords using Fernet."""

import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from fitness_connect.config import Config

logger = logging.getLogger(__name__)


def get_or_create_key() -> bytes:
    """Get encryption key from environment or generate a new one."""
    key = Config.ENCRYPTION_KEY

    if key:
        return key.encode() if isinstance(key, str) else key

    # Generate new key and keep it for the rest of the process
    key = Fernet.generate_key()
    Config.ENCRYPTION_KEY = key.decode()
    logger.warning(
        "FITNESS_ENCRYPTION_KEY not set. A new key has been generated.\n"
        "Please save this key to your environment variables:\n"
        f"FITNESS_ENCRYPTION_KEY={key.decode()}"
    )
    return key


def get_fernet() -> Fernet:
    return Fernet(get_or_create_key())


def encrypt_password(password: Optional[str]) -> Optional[str]:
    """Encrypt a password string."""
    if not password:
        return None

    encrypted = get_fernet().encrypt(password.encode())
    return encrypted.decode()


def decrypt_password(encrypted_password: Optional[str]) -> Optional[str]:
    """Decrypt an encrypted password string."""
    if not encrypted_password:
        return None

    try:
        decrypted = get_fernet().decrypt(encrypted_password.encode())
    except InvalidToken as e:
        logger.error("Failed to decrypt password")
        raise ValueError("Invalid encryption key or corrupted data") from e
    return decrypted.decode()
