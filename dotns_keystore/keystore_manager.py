"""Keystore manager for the account lifecycle operations."""

import logging
import os

from dotns_keystore.config import DEFAULT_CONFIG, KeystoreConfig
from dotns_keystore.exceptions import (
    AccountNameCollisionError,
    AccountNotFoundError,
    MissingPasswordError,
)
from dotns_keystore.file_store import KeystoreFileStore
from dotns_keystore.models import AccountListing, AccountPayload, Credential
from dotns_keystore.services import PayloadCipher
from dotns_keystore.validation_utils import validate_account_name, validate_password

logger = logging.getLogger(__name__)


class KeystoreManager:
    """Encrypted keystore of named accounts in one directory.

    Every operation that takes an account name validates it before touching
    the filesystem. The default pointer is only updated after the account
    file it refers to has been written.
    """

    def __init__(
        self,
        keystore_dir: str | os.PathLike,
        *,
        config: KeystoreConfig = DEFAULT_CONFIG
    ) -> None:
        """Initialize the keystore manager.

        Args:
            keystore_dir: Directory holding the keystore
            config: Keystore configuration (KDF parameters, permissions)
        """
        self._config = config
        self._file_store = KeystoreFileStore(
            keystore_dir,
            secure_permissions=config.secure_permissions,
        )
        self._cipher = PayloadCipher(config)

    def set_account(
        self,
        account_name: str,
        password: str,
        credential: Credential,
        *,
        make_default: bool = False
    ) -> bool:
        """Encrypt and store a credential under an account name.

        If a record already exists for the name it must decrypt with the
        given password before it is replaced.

        Args:
            account_name: Name to store the credential under
            password: Keystore password
            credential: Mnemonic or KeyUri to store
            make_default: Make this account the default

        Returns:
            True if the account is now the default account

        Raises:
            ValidationError: If the name is invalid or collides with another account
            MissingPasswordError: If the password is empty
            DecryptionError: If an existing record does not open with the password
            FileOperationError: If the record cannot be written
        """
        validate_account_name(account_name)
        validate_password(password)

        if self._file_store.exists(account_name):
            existing = self._cipher.decrypt(self._file_store.read(account_name), password)
            if existing.account != account_name:
                raise AccountNameCollisionError(
                    f"Account name '{account_name}' collides with existing account "
                    f"'{existing.account}' (same keystore file)"
                )

        record = self._cipher.encrypt(
            AccountPayload(account=account_name, credential=credential),
            password,
        )
        self._file_store.write(account_name, record)
        logger.info("Stored account %s", account_name)

        current_default = self._file_store.get_default_pointer()
        becomes_default = (
            make_default
            or current_default is None
            or not self._file_store.exists(current_default)
        )
        if becomes_default:
            self._file_store.set_default_pointer(account_name)
            logger.info("Default account set to %s", account_name)
        return becomes_default or current_default == account_name

    def list_accounts(self, password: str | None) -> AccountListing:
        """List stored account names without revealing secrets.

        Each record is decrypted to recover its canonical name, since file
        names may be sanitized.

        Args:
            password: Keystore password

        Returns:
            AccountListing with sorted names and the default account

        Raises:
            MissingPasswordError: If accounts exist but no password was given
            DecryptionError: If a record does not open with the password
        """
        account_files = self._file_store.list_account_files()
        if not account_files:
            return AccountListing()

        if not password:
            raise MissingPasswordError("Keystore password required to list accounts")

        names = []
        for file_name in account_files:
            record = self._file_store.read_record_file(file_name)
            names.append(self._cipher.decrypt(record, password).account)

        default = self._file_store.get_default_pointer()
        if default not in names:
            default = None
        return AccountListing(accounts=sorted(names), default=default)

    def use_account(self, account_name: str) -> None:
        """Make an existing account the default.

        Raises:
            ValidationError: If the name is invalid
            AccountNotFoundError: If no record exists for the name
            DecryptionError: If the record file is malformed
        """
        validate_account_name(account_name)
        self._require_account(account_name)

        self._file_store.set_default_pointer(account_name)
        logger.info("Default account set to %s", account_name)

    def remove_account(self, account_name: str) -> bool:
        """Delete an account, clearing the default pointer if it named it.

        Returns:
            True if the default pointer was cleared

        Raises:
            ValidationError: If the name is invalid
            AccountNotFoundError: If no record exists for the name
            DecryptionError: If the record file is malformed
        """
        validate_account_name(account_name)
        self._require_account(account_name)
        self._file_store.delete(account_name)
        logger.info("Removed account %s", account_name)

        if self._file_store.get_default_pointer() == account_name:
            self._file_store.clear_default_pointer()
            logger.info("Cleared default account")
            return True
        return False

    def clear(self) -> None:
        """Delete all accounts and the default pointer. Safe to repeat."""
        self._file_store.wipe()
        logger.info("Cleared keystore %s", self._file_store.keystore_directory)

    def _require_account(self, account_name: str) -> None:
        """Check that the record for a name carries that exact canonical name.

        File names are lossy, so a file may exist for a different account.
        The canonical name is stored in plaintext and needs no password.
        """
        record = self._file_store.read(account_name)
        if record.account != account_name:
            raise AccountNotFoundError(f"Account not found: {account_name}")

    def get_default_account(self) -> str | None:
        """Get the default account name, if any."""
        return self._file_store.get_default_pointer()

    @property
    def file_store(self) -> KeystoreFileStore:
        """Get the file store instance."""
        return self._file_store

    @property
    def keystore_directory(self) -> str:
        """Get the keystore directory."""
        return str(self._file_store.keystore_directory)
