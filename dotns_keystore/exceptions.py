"""Custom exceptions for the dotns keystore.

Every failure the keystore can report is one of these kinds. ``error_code``
is the stable identifier the CLI prints next to the message.
"""


class KeystoreError(Exception):
    """Base exception for all keystore errors."""

    error_code = "keystore_error"


class ValidationError(KeystoreError):
    """Raised when input validation fails before any filesystem access."""

    error_code = "validation_error"


class EmptyAccountNameError(ValidationError):
    """Raised when an account name is empty."""


class AccountNameTooLongError(ValidationError):
    """Raised when an account name exceeds the maximum length."""


class AccountNamePathSeparatorError(ValidationError):
    """Raised when an account name contains '/' or '\\'."""


class AccountNameDotError(ValidationError):
    """Raised when an account name is exactly '.' or '..'."""


class AccountNameEdgeDotError(ValidationError):
    """Raised when an account name starts or ends with a dot."""


class AccountNameSpecialCharacterError(ValidationError):
    """Raised when an account name contains a reserved character."""


class AccountNameControlCharacterError(ValidationError):
    """Raised when an account name contains control characters."""


class AccountNameCollisionError(ValidationError):
    """Raised when two account names map to the same keystore file."""


class NotFoundError(KeystoreError):
    """Raised when a requested account does not exist."""

    error_code = "not_found"


class AccountNotFoundError(NotFoundError):
    """Raised when no record exists for an account name."""


class AuthError(KeystoreError):
    """Raised when no usable credential can be resolved."""

    error_code = "no_auth"


class AuthConflictError(AuthError):
    """Raised when mutually exclusive credential sources are supplied together."""

    error_code = "auth_conflict"


class NoAccountSpecifiedError(AuthError):
    """Raised when the keystore must be used but no account was selected."""

    error_code = "no_account"


class MissingPasswordError(AuthError):
    """Raised when the keystore must be decrypted but no password was given."""

    error_code = "missing_password"


class NoAuthenticationError(AuthError):
    """Raised when an authenticated operation has no credential source at all."""


class DecryptionError(KeystoreError):
    """Raised when a record cannot be decrypted.

    Wrong passwords and tampered records raise this with the same message.
    """

    error_code = "decryption_error"
    generic_message = "Unable to decrypt account record: invalid password or corrupted data"


class UnsupportedRecordError(DecryptionError):
    """Raised when a record uses an unknown format version, KDF or cipher."""


class FileOperationError(KeystoreError):
    """Raised when file operations fail."""

    error_code = "file_error"
