"""AES-256-CBC encryption of individual profile fields."""

import logging
import os
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

logger = logging.getLogger("wellness")

IV_LENGTH = 16
KEY_LENGTH = 32
UNENCRYPTED_MARKER = "UNENCRYPTED:"
DEVELOPMENT_KEY = "your-fallback-encryption-key-32-chars!!"


class EncryptionService:
    """
    Encrypts strings as ``"<iv hex>:<ciphertext hex>"``.

    Values that cannot be decrypted (legacy plaintext, foreign key) are
    returned unchanged so that reads never fail on a bad field.
    """

    def __init__(self, key: Optional[str], production: bool = False):
        """
        Initialize encryption service.

        Args:
            key: Encryption key; padded with "0" or truncated to 32 bytes
            production: Refuse to fall back to the development key

        Raises:
            RuntimeError: If no key is configured in production
        """
        if not key:
            if production:
                raise RuntimeError("ENCRYPTION_KEY is not defined in environment variables")
            logger.warning("No encryption key configured, using the development key")
            key = DEVELOPMENT_KEY

        self._key = key.encode("utf-8").ljust(KEY_LENGTH, b"0")[:KEY_LENGTH]

    def encrypt(self, text: str) -> str:
        """Encrypt ``text`` with a random IV."""
        iv = os.urandom(IV_LENGTH)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(text.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return f"{iv.hex()}:{ciphertext.hex()}"

    def decrypt(self, text: str) -> str:
        """Decrypt a value produced by :meth:`encrypt`."""
        if text.startswith(UNENCRYPTED_MARKER):
            return text[len(UNENCRYPTED_MARKER) :]

        try:
            iv_hex, _, ciphertext_hex = text.partition(":")
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)

            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plain = unpadder.update(padded) + unpadder.finalize()
            return plain.decode("utf-8")
        except ValueError as e:
            logger.error(f"Decryption error: {e}")
            return text

    def encrypt_optional(self, value: Optional[str]) -> Optional[str]:
        """Encrypt, mapping empty values to None."""
        return self.encrypt(value) if value else None

    def decrypt_optional(self, value: Optional[str]) -> Optional[str]:
        return self.decrypt(value) if value else None
