"""Resolution of flags, environment and keystore into one credential."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotns_keystore.config import DEFAULT_CONFIG, KeystoreConfig, default_keystore_dir
from dotns_keystore.constants import Constants
from dotns_keystore.exceptions import (
    AccountNotFoundError,
    AuthConflictError,
    MissingPasswordError,
    NoAccountSpecifiedError,
    NoAuthenticationError,
)
from dotns_keystore.file_store import KeystoreFileStore
from dotns_keystore.models import Credential, KeyUri, Mnemonic
from dotns_keystore.services.payload_cipher import PayloadCipher
from dotns_keystore.validation_utils import validate_account_name

logger = logging.getLogger(__name__)

SOURCE_FLAG = "flag"
SOURCE_ENV = "env"
SOURCE_KEYSTORE = "keystore"


def _present(value: Optional[str]) -> Optional[str]:
    return value if value else None


@dataclass(frozen=True)
class AuthInputs:
    """Credential-related values given explicitly on the command line."""

    mnemonic: Optional[str] = None
    key_uri: Optional[str] = None
    keystore_path: Optional[str] = None
    password: Optional[str] = None
    account: Optional[str] = None


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Credential-related environment variables, captured once."""

    keystore_path: Optional[str] = None
    password: Optional[str] = None
    mnemonic: Optional[str] = None
    key_uri: Optional[str] = None

    @classmethod
    def capture(cls, environ: Mapping[str, str] | None = None) -> "EnvironmentSnapshot":
        """Copy the recognized variables out of the environment.

        Args:
            environ: Mapping to read from (default: ``os.environ``)

        Returns:
            Immutable snapshot; empty variables are treated as unset
        """
        if environ is None:
            environ = os.environ
        return cls(
            keystore_path=_present(environ.get(Constants.ENV_KEYSTORE_PATH())),
            password=_present(environ.get(Constants.ENV_KEYSTORE_PASSWORD())),
            mnemonic=_present(environ.get(Constants.ENV_MNEMONIC())),
            key_uri=_present(environ.get(Constants.ENV_KEY_URI())),
        )


@dataclass(frozen=True)
class ResolvedAuth:
    """A resolved credential and where it came from."""

    credential: Credential
    source: str
    account: Optional[str] = None


class CredentialResolver:
    """Turns flags, environment and keystore into exactly one credential.

    Rules are applied in a fixed order and the first match wins:

    1. a mnemonic and a key URI together (from any mix of flag and
       environment) is a conflict
    2. a mnemonic
    3. a key URI
    4. the keystore account named by the flag or the default pointer,
       decrypted with the flag or environment password

    The resolver never falls back silently: if the keystore is needed and
    the account, password or record is missing, a specific error is raised.
    """

    def __init__(self, config: KeystoreConfig = DEFAULT_CONFIG):
        """Initialize the resolver.

        Args:
            config: Keystore configuration
        """
        self._config = config
        self._cipher = PayloadCipher(config)

    @staticmethod
    def keystore_dir(flags: AuthInputs, env: EnvironmentSnapshot) -> Path:
        """Pick the keystore directory: flag, then environment, then the default."""
        return Path(
            _present(flags.keystore_path)
            or env.keystore_path
            or default_keystore_dir()
        )

    def resolve(
        self,
        flags: AuthInputs,
        env: EnvironmentSnapshot,
        *,
        require_auth: bool = True
    ) -> Optional[Credential]:
        """Resolve the credential to sign with.

        Args:
            flags: Explicit command-line values
            env: Environment snapshot
            require_auth: When False, return None instead of consulting the keystore

        Returns:
            The resolved Credential, or None in read-only mode without a direct credential
        """
        resolved = self.resolve_auth(flags, env, require_auth=require_auth)
        return resolved.credential if resolved else None

    def resolve_auth(
        self,
        flags: AuthInputs,
        env: EnvironmentSnapshot,
        *,
        require_auth: bool = True
    ) -> Optional[ResolvedAuth]:
        """Resolve the credential together with its source.

        Args:
            flags: Explicit command-line values
            env: Environment snapshot
            require_auth: When False, return None instead of consulting the keystore

        Returns:
            ResolvedAuth, or None in read-only mode without a direct credential

        Raises:
            AuthConflictError: If both a mnemonic and a key URI are present
            NoAuthenticationError: If no source exists and the keystore is missing
            NoAccountSpecifiedError: If no account flag and no default account
            MissingPasswordError: If the keystore password is missing
            AccountNotFoundError: If the selected account has no record
            DecryptionError: If the password is wrong or the record is corrupted
        """
        mnemonic, mnemonic_source = self._pick(flags.mnemonic, env.mnemonic)
        key_uri, key_uri_source = self._pick(flags.key_uri, env.key_uri)

        if mnemonic and key_uri:
            raise AuthConflictError("Cannot specify both mnemonic and key URI")

        if mnemonic:
            return ResolvedAuth(credential=Mnemonic(mnemonic), source=mnemonic_source)

        if key_uri:
            return ResolvedAuth(credential=KeyUri(key_uri), source=key_uri_source)

        if not require_auth:
            return None

        return self._resolve_from_keystore(flags, env)

    def _resolve_from_keystore(
        self,
        flags: AuthInputs,
        env: EnvironmentSnapshot
    ) -> ResolvedAuth:
        if _present(flags.account):
            validate_account_name(flags.account)

        store = KeystoreFileStore(
            self.keystore_dir(flags, env),
            secure_permissions=self._config.secure_permissions,
        )
        if not store.exists_on_disk:
            raise NoAuthenticationError(
                "No authentication provided: pass a mnemonic, a key URI, or set up a keystore account"
            )

        account_name = _present(flags.account) or store.get_default_pointer()
        if account_name is None:
            raise NoAccountSpecifiedError("No account specified and no default account set")
        validate_account_name(account_name)

        password = _present(flags.password) or env.password
        if password is None:
            raise MissingPasswordError(f"Keystore password required to unlock account {account_name}")

        record = store.read(account_name)
        payload = self._cipher.decrypt(record, password)

        # Sanitized file names can collide; only the sealed name counts
        if payload.account != account_name:
            raise AccountNotFoundError(f"Account not found: {account_name}")

        logger.info("Resolved credential from keystore account %s", account_name)
        return ResolvedAuth(
            credential=payload.credential,
            source=SOURCE_KEYSTORE,
            account=payload.account,
        )

    @staticmethod
    def _pick(flag_value: Optional[str], env_value: Optional[str]) -> tuple[Optional[str], Optional[str]]:
        if _present(flag_value):
            return flag_value, SOURCE_FLAG
        if _present(env_value):
            return env_value, SOURCE_ENV
        return None, None
