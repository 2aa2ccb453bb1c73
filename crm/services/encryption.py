"""Credentials encryption using Fernet (symmetric encryption)"""

from functools import lru_cache
import logging

from cryptography.fernet import Fernet, InvalidToken

from crm.config import get_settings
from crm.exceptions import InternalError

logger = logging.getLogger(__name__)


@lru_cache()
def get_cipher(key: str) -> Fernet:
    return Fernet(key.encode())


def _cipher() -> Fernet:
    key = get_settings().ENCRYPTION_KEY
    if not key:
        logger.error("ENCRYPTION_KEY is not configured; project credentials are unavailable")
        raise InternalError("Credential encryption is not configured")
    try:
        return get_cipher(key)
    except (ValueError, TypeError) as e:
        logger.error(f"Failed to initialize Fernet cipher: {e}")
        logger.error("ENCRYPTION_KEY must be a valid Fernet key. Generate with: Fernet.generate_key().decode()")
        raise InternalError("Credential encryption is misconfigured")


def encrypt_password(data: str) -> str:
    """
    Encrypt a credential password.

    Args:
        data: Plain text password

    Returns:
        Fernet token (base64 encoded string)
    """
    return _cipher().encrypt(data.encode()).decode()


def decrypt_password(encrypted_data: str) -> str:
    """
    Decrypt a stored credential password.

    Raises:
        InternalError: the token was not produced with the configured key
    """
    try:
        return _cipher().decrypt(encrypted_data.encode()).decode()
    except InvalidToken:
        logger.error("Decryption failed: token does not match ENCRYPTION_KEY")
        raise InternalError("Failed to decrypt credential")


def generate_encryption_key() -> str:
    """New Fernet key for the ENCRYPTION_KEY setting"""
    return Fernet.generate_key().decode()
