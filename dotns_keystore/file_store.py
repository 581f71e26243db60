"""File management for per-account encrypted records and the default pointer."""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

from dotns_keystore.constants import Constants
from dotns_keystore.exceptions import (
    AccountNotFoundError,
    DecryptionError,
    FileOperationError,
)
from dotns_keystore.models import EncryptedAccountRecord

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def account_file_name(account_name: str) -> str:
    """Map a validated account name to its file name.

    The mapping is lossy: every character outside ``[A-Za-z0-9_.-]`` becomes
    ``_``. The canonical name sealed inside the record is authoritative.
    """
    return _UNSAFE_FILENAME_CHARS.sub("_", account_name) + Constants.ACCOUNT_FILE_SUFFIX()


class KeystoreFileStore:
    """Manages keystore files in one directory with atomic operations.

    A missing directory reads as an empty keystore; it is created on the
    first write.
    """

    def __init__(
        self,
        keystore_dir: str | os.PathLike,
        *,
        secure_permissions: bool = True
    ):
        """Initialize the file store.

        Args:
            keystore_dir: Directory holding account files and the default pointer
            secure_permissions: Restrict new files to the owner (0600)
        """
        self._keystore_dir = Path(keystore_dir)
        self._pointer_file = self._keystore_dir / Constants.DEFAULT_POINTER_FILE()
        self._secure_permissions = secure_permissions

    def _ensure_keystore_directory(self) -> None:
        try:
            self._keystore_dir.mkdir(parents=True, exist_ok=True)
            if self._secure_permissions:
                os.chmod(self._keystore_dir, 0o700)
        except OSError as e:
            raise FileOperationError(
                f"Failed to create keystore directory {self._keystore_dir}: {e}"
            ) from e

    def _write_text_atomic(self, file_path: Path, content: str) -> None:
        """Write text atomically using a temporary file in the same directory.

        Args:
            file_path: Path to the target file
            content: Text to write

        Raises:
            FileOperationError: If write operation fails
        """
        self._ensure_keystore_directory()

        fd, temp_name = tempfile.mkstemp(
            dir=self._keystore_dir,
            prefix=f".{file_path.name}.",
            suffix=Constants.TEMP_FILE_SUFFIX(),
        )
        temp_file = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())

            if self._secure_permissions:
                os.chmod(temp_file, 0o600)

            os.replace(temp_file, file_path)
        except OSError as e:
            # Clean up temporary file if it exists
            temp_file.unlink(missing_ok=True)
            raise FileOperationError(f"Failed to write file {file_path}: {e}") from e

        logger.debug("Wrote %s", file_path)

    def _write_json_atomic(self, file_path: Path, data: dict[str, Any]) -> None:
        self._write_text_atomic(
            file_path,
            json.dumps(data, indent=2, ensure_ascii=False) + "\n",
        )

    def _read_json(self, file_path: Path) -> Optional[dict[str, Any]]:
        """Read JSON data from file.

        Args:
            file_path: Path to the file to read

        Returns:
            JSON data as dictionary, or None if file doesn't exist

        Raises:
            FileOperationError: If the file cannot be read
            DecryptionError: If the file is not a JSON object
        """
        try:
            with file_path.open(encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise FileOperationError(f"Failed to read file {file_path}: {e}") from e

        try:
            data = json.loads(content)
        except ValueError as e:
            raise DecryptionError(DecryptionError.generic_message) from e
        if not isinstance(data, dict):
            raise DecryptionError(DecryptionError.generic_message)
        return data

    def _unlink(self, file_path: Path) -> bool:
        try:
            file_path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise FileOperationError(f"Failed to delete file {file_path}: {e}") from e
        logger.debug("Deleted %s", file_path)
        return True

    def account_file_path(self, account_name: str) -> Path:
        """Get the record file path for an account name."""
        return self._keystore_dir / account_file_name(account_name)

    def write(self, account_name: str, record: EncryptedAccountRecord) -> None:
        """Save an account record atomically, replacing any existing one.

        Args:
            account_name: Validated account name
            record: Encrypted record to persist

        Raises:
            FileOperationError: If save operation fails
        """
        self._write_json_atomic(self.account_file_path(account_name), record.to_dict())

    def read(self, account_name: str) -> EncryptedAccountRecord:
        """Read an account record.

        Args:
            account_name: Validated account name

        Returns:
            EncryptedAccountRecord stored for the name

        Raises:
            AccountNotFoundError: If no file maps to the name
            DecryptionError: If the file content is malformed
            FileOperationError: If read operation fails
        """
        return self.read_record_file(account_file_name(account_name), account_name=account_name)

    def read_record_file(
        self,
        file_name: str,
        *,
        account_name: str | None = None
    ) -> EncryptedAccountRecord:
        """Read an account record by its file name.

        Args:
            file_name: File name as returned by :meth:`list_account_files`
            account_name: Name to report if the file is missing

        Returns:
            EncryptedAccountRecord parsed from the file
        """
        data = self._read_json(self._keystore_dir / file_name)
        if data is None:
            raise AccountNotFoundError(f"Account not found: {account_name or file_name}")

        try:
            return EncryptedAccountRecord.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise DecryptionError(DecryptionError.generic_message) from e

    def exists(self, account_name: str) -> bool:
        """Check whether a record file exists for an account name."""
        return self.account_file_path(account_name).is_file()

    def delete(self, account_name: str) -> None:
        """Delete an account record.

        Args:
            account_name: Validated account name

        Raises:
            AccountNotFoundError: If no file maps to the name
            FileOperationError: If delete operation fails
        """
        if not self._unlink(self.account_file_path(account_name)):
            raise AccountNotFoundError(f"Account not found: {account_name}")

    def list_account_files(self) -> list[str]:
        """List account record file names, sorted.

        Returns:
            File names of existing account records; empty if the directory is missing
        """
        if not self._keystore_dir.is_dir():
            return []
        try:
            return sorted(
                entry.name
                for entry in self._keystore_dir.iterdir()
                if entry.is_file()
                and entry.name.endswith(Constants.ACCOUNT_FILE_SUFFIX())
                and not entry.name.startswith(".")
            )
        except OSError as e:
            raise FileOperationError(f"Failed to list keystore {self._keystore_dir}: {e}") from e

    def get_default_pointer(self) -> Optional[str]:
        """Read the default account name.

        Returns:
            The trimmed account name, or None when no default is set
        """
        try:
            content = self._pointer_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise FileOperationError(f"Failed to read file {self._pointer_file}: {e}") from e

        account_name = content.strip()
        return account_name or None

    def set_default_pointer(self, account_name: str) -> None:
        """Point the default at an account name atomically."""
        self._write_text_atomic(self._pointer_file, f"{account_name}\n")

    def clear_default_pointer(self) -> None:
        """Remove the default pointer; a missing pointer is not an error."""
        self._unlink(self._pointer_file)

    def cleanup_temp_files(self) -> int:
        """Remove temporary files left behind by an interrupted write.

        Returns:
            Number of files removed
        """
        if not self._keystore_dir.is_dir():
            return 0
        removed = 0
        for temp_file in self._keystore_dir.glob(f".*{Constants.TEMP_FILE_SUFFIX()}"):
            if self._unlink(temp_file):
                removed += 1
        return removed

    def wipe(self) -> None:
        """Delete every account file, the default pointer and stale temp files.

        The directory itself is left in place. Calling this on a missing or
        already empty keystore is a no-op.
        """
        for file_name in self.list_account_files():
            self._unlink(self._keystore_dir / file_name)
        self.clear_default_pointer()
        self.cleanup_temp_files()

    @property
    def keystore_directory(self) -> Path:
        """Get the keystore directory path."""
        return self._keystore_dir

    @property
    def default_pointer_path(self) -> Path:
        """Get the default pointer file path."""
        return self._pointer_file

    @property
    def exists_on_disk(self) -> bool:
        """Whether the keystore directory exists."""
        return self._keystore_dir.is_dir()
