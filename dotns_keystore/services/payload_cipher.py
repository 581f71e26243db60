"""Password-based encryption of account payloads."""

import json
import logging

from dotns_keystore.config import DEFAULT_CONFIG, KeystoreConfig, is_power_of_two
from dotns_keystore.constants import Constants
from dotns_keystore.crypto_utils import CryptoUtils
from dotns_keystore.exceptions import DecryptionError, UnsupportedRecordError
from dotns_keystore.models import (
    AccountPayload,
    CipherParams,
    EncryptedAccountRecord,
    KdfParams,
)

logger = logging.getLogger(__name__)


class PayloadCipher:
    """Seals account payloads with scrypt and AES-256-GCM.

    Every call to :meth:`encrypt` draws a fresh salt and nonce, so the same
    payload and password never produce the same record twice. Decryption
    fails closed: a wrong password and a tampered record raise the same
    :class:`DecryptionError`.
    """

    def __init__(self, config: KeystoreConfig = DEFAULT_CONFIG):
        """Initialize the payload cipher.

        Args:
            config: KDF parameters used for new records
        """
        self._config = config

    def encrypt(self, payload: AccountPayload, password: str) -> EncryptedAccountRecord:
        """Encrypt an account payload with a password.

        Args:
            payload: Canonical account name and credential to seal
            password: Keystore password

        Returns:
            EncryptedAccountRecord ready to be persisted

        Raises:
            ValidationError: If the password is empty
        """
        kdf = KdfParams(
            salt=CryptoUtils.generate_salt(self._config.salt_size),
            cost=self._config.scrypt_cost,
            block_size=self._config.scrypt_block_size,
            parallelization=self._config.scrypt_parallelization,
        )
        key = CryptoUtils.derive_key_from_password(
            password,
            kdf.salt,
            cost=kdf.cost,
            block_size=kdf.block_size,
            parallelization=kdf.parallelization,
            length=kdf.length,
        )

        nonce = CryptoUtils.generate_nonce()
        plaintext = json.dumps(payload.to_dict(), ensure_ascii=False).encode("utf-8")
        ciphertext, tag = CryptoUtils.encrypt_with_aesgcm(
            key,
            nonce,
            plaintext,
            self._associated_data(payload.account),
        )

        logger.debug("Encrypted payload for account %s", payload.account)
        return EncryptedAccountRecord(
            account=payload.account,
            kdf=kdf,
            cipher=CipherParams(nonce=nonce, tag=tag),
            ciphertext=ciphertext,
        )

    def decrypt(self, record: EncryptedAccountRecord, password: str) -> AccountPayload:
        """Decrypt an account record with a password.

        Args:
            record: Record read from the keystore
            password: Keystore password

        Returns:
            The decrypted AccountPayload

        Raises:
            UnsupportedRecordError: If the record format is unknown
            DecryptionError: If the password is wrong or the record was tampered with
        """
        self._check_supported(record)

        kdf = record.kdf
        if (
            not is_power_of_two(kdf.cost)
            or not Constants.MIN_SCRYPT_COST() <= kdf.cost <= Constants.MAX_SCRYPT_COST()
            or kdf.block_size < 1
            or kdf.parallelization < 1
            or kdf.length != Constants.KEY_SIZE_BYTES()
            or kdf.parallelization > Constants.MAX_SCRYPT_PARALLELIZATION()
            or 128 * kdf.cost * kdf.block_size > Constants.MAX_SCRYPT_MEMORY()
        ):
            raise DecryptionError(DecryptionError.generic_message)

        try:
            key = CryptoUtils.derive_key_from_password(
                password,
                kdf.salt,
                cost=kdf.cost,
                block_size=kdf.block_size,
                parallelization=kdf.parallelization,
                length=kdf.length,
            )
        except DecryptionError:
            raise
        except Exception as e:
            raise DecryptionError(DecryptionError.generic_message) from e

        plaintext = CryptoUtils.decrypt_with_aesgcm(
            key,
            record.cipher.nonce,
            record.ciphertext,
            record.cipher.tag,
            self._associated_data(record.account),
        )

        try:
            payload = AccountPayload.from_dict(json.loads(plaintext.decode("utf-8")))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise DecryptionError(DecryptionError.generic_message) from e

        if payload.account != record.account:
            raise DecryptionError(DecryptionError.generic_message)

        return payload

    @staticmethod
    def _associated_data(account: str) -> bytes:
        return account.encode("utf-8")

    @staticmethod
    def _check_supported(record: EncryptedAccountRecord) -> None:
        unsupported = None
        if record.version != Constants.RECORD_VERSION():
            unsupported = f"record version {record.version!r}"
        elif record.kdf.name != Constants.KDF_NAME():
            unsupported = f"key derivation function {record.kdf.name!r}"
        elif record.cipher.name != Constants.CIPHER_NAME():
            unsupported = f"cipher {record.cipher.name!r}"

        if unsupported is not None:
            logger.debug("Unsupported %s in record for account %s", unsupported, record.account)
            raise UnsupportedRecordError(DecryptionError.generic_message)
