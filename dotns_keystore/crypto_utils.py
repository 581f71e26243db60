"""Cryptographic utilities for the dotns keystore."""

import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from dotns_keystore.constants import Constants
from dotns_keystore.exceptions import DecryptionError, KeystoreError, ValidationError


class CryptoUtils:
    """Cryptographic primitives for keystore records."""

    _KEY_SIZE_BYTES = Constants.KEY_SIZE_BYTES()
    _NONCE_SIZE = Constants.NONCE_SIZE()
    _TAG_SIZE = Constants.TAG_SIZE()
    _MIN_SALT_SIZE = Constants.SALT_SIZE()

    @classmethod
    def generate_salt(cls, size: int | None = None) -> bytes:
        """Generate a random salt.

        Args:
            size: Salt size in bytes (default: 16)

        Returns:
            Random salt as bytes
        """
        return secrets.token_bytes(size or cls._MIN_SALT_SIZE)

    @classmethod
    def generate_nonce(cls) -> bytes:
        """Generate a random 96-bit AES-GCM nonce.

        Returns:
            Random nonce as bytes
        """
        return secrets.token_bytes(cls._NONCE_SIZE)

    @classmethod
    def derive_key_from_password(
        cls,
        password: str,
        salt: bytes,
        *,
        cost: int,
        block_size: int,
        parallelization: int,
        length: int | None = None
    ) -> bytes:
        """Derive a key from a password using scrypt.

        Args:
            password: Password to derive key from
            salt: Salt for key derivation
            cost: scrypt CPU/memory cost (N)
            block_size: scrypt block size (r)
            parallelization: scrypt parallelization (p)
            length: Derived key length in bytes (default: 32)

        Returns:
            Derived key as bytes

        Raises:
            ValidationError: If parameters are invalid
            KeystoreError: If key derivation fails
        """
        if not password or not isinstance(password, str):
            raise ValidationError("Password must be a non-empty string")

        if not salt or len(salt) < cls._MIN_SALT_SIZE:
            raise ValidationError(f"Salt must be at least {cls._MIN_SALT_SIZE} bytes")

        try:
            kdf = Scrypt(
                salt=salt,
                length=length or cls._KEY_SIZE_BYTES,
                n=cost,
                r=block_size,
                p=parallelization,
            )
            return kdf.derive(password.encode("utf-8"))
        except (ValueError, MemoryError) as e:
            raise KeystoreError(f"Key derivation failed: {e}") from e

    @classmethod
    def encrypt_with_aesgcm(
        cls,
        key: bytes,
        nonce: bytes,
        data: bytes,
        associated_data: bytes | None = None
    ) -> tuple[bytes, bytes]:
        """Encrypt data using AES-256-GCM.

        Args:
            key: Encryption key (32 bytes)
            nonce: Nonce (12 bytes), never reused with the same key
            data: Data to encrypt
            associated_data: Authenticated but unencrypted data

        Returns:
            Tuple of (ciphertext, tag)

        Raises:
            ValidationError: If key or nonce size is invalid
        """
        if len(key) != cls._KEY_SIZE_BYTES:
            raise ValidationError(f"Key must be exactly {cls._KEY_SIZE_BYTES} bytes")
        if len(nonce) != cls._NONCE_SIZE:
            raise ValidationError(f"Nonce must be exactly {cls._NONCE_SIZE} bytes")
        if not data:
            raise ValidationError("Data cannot be empty")

        sealed = AESGCM(key).encrypt(nonce, data, associated_data)
        # AESGCM appends the tag to the ciphertext
        return sealed[:-cls._TAG_SIZE], sealed[-cls._TAG_SIZE:]

    @classmethod
    def decrypt_with_aesgcm(
        cls,
        key: bytes,
        nonce: bytes,
        ciphertext: bytes,
        tag: bytes,
        associated_data: bytes | None = None
    ) -> bytes:
        """Decrypt and authenticate data using AES-256-GCM.

        Args:
            key: Decryption key (32 bytes)
            nonce: Nonce used for encryption
            ciphertext: Encrypted data without the tag
            tag: Authentication tag (16 bytes)
            associated_data: Associated data used for encryption

        Returns:
            Decrypted data as bytes

        Raises:
            DecryptionError: If the key is wrong or any input was tampered with
        """
        if (
            len(key) != cls._KEY_SIZE_BYTES
            or len(nonce) != cls._NONCE_SIZE
            or len(tag) != cls._TAG_SIZE
        ):
            raise DecryptionError(DecryptionError.generic_message)

        try:
            return AESGCM(key).decrypt(nonce, ciphertext + tag, associated_data)
        except InvalidTag as e:
            raise DecryptionError(DecryptionError.generic_message) from e
