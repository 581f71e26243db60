"""Services package for the dotns keystore."""

from dotns_keystore.services.payload_cipher import PayloadCipher
from dotns_keystore.services.credential_resolver import (
    AuthInputs,
    CredentialResolver,
    EnvironmentSnapshot,
    ResolvedAuth,
)

__all__ = [
    "AuthInputs",
    "CredentialResolver",
    "EnvironmentSnapshot",
    "PayloadCipher",
    "ResolvedAuth",
]
