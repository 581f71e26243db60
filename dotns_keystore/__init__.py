"""dotns keystore - encrypted local storage for named signing credentials.

This package stores mnemonic phrases and key URIs in password-encrypted
per-account files and resolves which credential a command should sign with.
"""

from dotns_keystore.exceptions import (
    AccountNotFoundError,
    AuthConflictError,
    AuthError,
    DecryptionError,
    FileOperationError,
    KeystoreError,
    MissingPasswordError,
    NoAccountSpecifiedError,
    NoAuthenticationError,
    NotFoundError,
    ValidationError,
)
from dotns_keystore.keystore_manager import KeystoreManager
from dotns_keystore.models import Credential, KeyUri, Mnemonic
from dotns_keystore.services import (
    AuthInputs,
    CredentialResolver,
    EnvironmentSnapshot,
    PayloadCipher,
    ResolvedAuth,
)

try:
    from importlib.metadata import PackageNotFoundError, version
    __version__ = version("dotns-keystore")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = [
    "AccountNotFoundError",
    "AuthConflictError",
    "AuthError",
    "AuthInputs",
    "Credential",
    "CredentialResolver",
    "DecryptionError",
    "EnvironmentSnapshot",
    "FileOperationError",
    "KeyUri",
    "KeystoreError",
    "KeystoreManager",
    "MissingPasswordError",
    "Mnemonic",
    "NoAccountSpecifiedError",
    "NoAuthenticationError",
    "NotFoundError",
    "PayloadCipher",
    "ResolvedAuth",
    "ValidationError",
]
