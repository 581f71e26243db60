"""Validation utilities for the keystore package."""

from dotns_keystore.constants import Constants
from dotns_keystore.exceptions import (
    AccountNameControlCharacterError,
    AccountNameDotError,
    AccountNameEdgeDotError,
    AccountNamePathSeparatorError,
    AccountNameSpecialCharacterError,
    AccountNameTooLongError,
    EmptyAccountNameError,
    MissingPasswordError,
)


def validate_account_name(name: str | None) -> str:
    """Validate an account name before it is used to build a file path.

    Checks run in a fixed order and the first failure wins, so each kind of
    bad name gets its own error type and message. No disk access happens here.

    Args:
        name: Logical account name supplied by the caller

    Returns:
        The account name, unchanged

    Raises:
        ValidationError: One of the account name subclasses describing
                         the first rule the name breaks
    """
    if name is None or name == "":
        raise EmptyAccountNameError("Account name cannot be empty")

    max_length = Constants.MAX_ACCOUNT_NAME_LENGTH()
    if len(name) > max_length or len(name.encode("utf-8")) > max_length:
        raise AccountNameTooLongError(f"Account name too long (max {max_length} characters)")

    if any(sep in name for sep in Constants.PATH_SEPARATORS()):
        raise AccountNamePathSeparatorError("Account name cannot contain path separators (/ or \\)")

    if name in (".", ".."):
        raise AccountNameDotError("Account name cannot be '.' or '..'")

    if name.startswith(".") or name.endswith("."):
        raise AccountNameEdgeDotError("Account name cannot start or end with a dot")

    if any(c in Constants.RESERVED_CHARACTERS() for c in name):
        raise AccountNameSpecialCharacterError(
            'Account name cannot contain special characters: < > : " | ? *'
        )

    if any(ord(c) < 32 or ord(c) == 127 for c in name):
        raise AccountNameControlCharacterError("Account name cannot contain control characters")

    return name


def validate_password(password: str | None) -> str:
    """Ensure a keystore password was supplied.

    Args:
        password: Keystore password

    Returns:
        The password, unchanged

    Raises:
        MissingPasswordError: If the password is missing or empty
    """
    if password is None or password == "":
        raise MissingPasswordError("Keystore password required")
    return password
