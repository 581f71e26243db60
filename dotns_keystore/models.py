"""Data models for the dotns keystore."""

import base64
import binascii
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

from dotns_keystore.constants import Constants


MNEMONIC_KIND = "mnemonic"
KEY_URI_KIND = "key-uri"


@dataclass(frozen=True, repr=False)
class Mnemonic:
    """A seed phrase credential."""

    phrase: str

    kind = MNEMONIC_KIND

    def __post_init__(self) -> None:
        if not self.phrase:
            raise ValueError("Mnemonic phrase cannot be empty")

    def __repr__(self) -> str:
        return "Mnemonic(phrase=<redacted>)"

    @property
    def secret(self) -> str:
        return self.phrase


@dataclass(frozen=True, repr=False)
class KeyUri:
    """A raw key descriptor credential (for example ``//Alice``)."""

    uri: str

    kind = KEY_URI_KIND

    def __post_init__(self) -> None:
        if not self.uri:
            raise ValueError("Key URI cannot be empty")

    def __repr__(self) -> str:
        return "KeyUri(uri=<redacted>)"

    @property
    def secret(self) -> str:
        return self.uri


Credential = Union[Mnemonic, KeyUri]


def credential_to_dict(credential: Credential) -> dict[str, str]:
    """Serialize a credential into its tagged dictionary form."""
    if isinstance(credential, Mnemonic):
        return {"kind": MNEMONIC_KIND, "mnemonic": credential.phrase}
    if isinstance(credential, KeyUri):
        return {"kind": KEY_URI_KIND, "key_uri": credential.uri}
    raise TypeError(f"Unsupported credential type: {type(credential).__name__}")


def credential_from_dict(data: dict[str, Any]) -> Credential:
    """Rebuild a credential from its tagged dictionary form."""
    kind = data.get("kind")
    if kind == MNEMONIC_KIND:
        return Mnemonic(data["mnemonic"])
    if kind == KEY_URI_KIND:
        return KeyUri(data["key_uri"])
    raise ValueError(f"Unknown credential kind: {kind!r}")


def _b64encode(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def _b64decode(value: str) -> bytes:
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, AttributeError) as e:
        raise ValueError(f"Invalid base64 field: {e}") from e


def _parse_datetime(value: str) -> datetime:
    """Parse datetime string to datetime object."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass
class AccountPayload:
    """Plaintext sealed inside an account record.

    Holds the canonical account name next to the credential so the name can
    be recovered even when the file name was sanitized.
    """

    account: str
    credential: Credential
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = Constants.PAYLOAD_VERSION()

    def __post_init__(self) -> None:
        if not self.account:
            raise ValueError("account cannot be empty")
        if isinstance(self.updated_at, str):
            self.updated_at = _parse_datetime(self.updated_at)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "version": self.version,
            "account": self.account,
            "credential": credential_to_dict(self.credential),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccountPayload":
        """Create AccountPayload from dictionary."""
        return cls(
            account=data["account"],
            credential=credential_from_dict(data["credential"]),
            updated_at=data.get("updated_at") or datetime.now(timezone.utc),
            version=data.get("version", Constants.PAYLOAD_VERSION()),
        )


@dataclass(frozen=True)
class KdfParams:
    """Scrypt parameters persisted with each record."""

    salt: bytes
    cost: int
    block_size: int
    parallelization: int
    length: int = Constants.KEY_SIZE_BYTES()
    name: str = Constants.KDF_NAME()

    def __post_init__(self) -> None:
        if not isinstance(self.salt, bytes):
            raise ValueError("kdf salt must be bytes")
        for value in (self.cost, self.block_size, self.parallelization, self.length):
            if not isinstance(value, int):
                raise ValueError("kdf parameters must be integers")

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "salt": _b64encode(self.salt),
            "cost": self.cost,
            "block_size": self.block_size,
            "parallelization": self.parallelization,
            "length": self.length,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KdfParams":
        return cls(
            name=data["name"],
            salt=_b64decode(data["salt"]),
            cost=int(data["cost"]),
            block_size=int(data["block_size"]),
            parallelization=int(data["parallelization"]),
            length=int(data["length"]),
        )


@dataclass(frozen=True)
class CipherParams:
    """AEAD parameters persisted with each record."""

    nonce: bytes
    tag: bytes
    name: str = Constants.CIPHER_NAME()

    def __post_init__(self) -> None:
        if not isinstance(self.nonce, bytes) or not isinstance(self.tag, bytes):
            raise ValueError("cipher nonce and tag must be bytes")

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "nonce": _b64encode(self.nonce),
            "tag": _b64encode(self.tag),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CipherParams":
        return cls(
            name=data["name"],
            nonce=_b64decode(data["nonce"]),
            tag=_b64decode(data["tag"]),
        )


@dataclass
class EncryptedAccountRecord:
    """Encrypted account file structure.

    ``account`` is the canonical name in plaintext. It is bound to the
    ciphertext as associated data, so editing it breaks decryption.
    """

    account: str
    kdf: KdfParams
    cipher: CipherParams
    ciphertext: bytes
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = Constants.RECORD_VERSION()

    def __post_init__(self) -> None:
        """Validate and process fields after initialization."""
        if not isinstance(self.account, str):
            raise ValueError("account must be a string")
        if not self.account:
            raise ValueError("account cannot be empty")
        if not self.ciphertext:
            raise ValueError("ciphertext cannot be empty")

        # Parse datetime string if provided
        if isinstance(self.created_at, str):
            self.created_at = _parse_datetime(self.created_at)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with proper serialization."""
        return {
            "version": self.version,
            "account": self.account,
            "kdf": self.kdf.to_dict(),
            "cipher": self.cipher.to_dict(),
            "ciphertext": _b64encode(self.ciphertext),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EncryptedAccountRecord":
        """Create EncryptedAccountRecord from dictionary."""
        return cls(
            version=int(data["version"]),
            account=data["account"],
            kdf=KdfParams.from_dict(data["kdf"]),
            cipher=CipherParams.from_dict(data["cipher"]),
            ciphertext=_b64decode(data["ciphertext"]),
            created_at=data.get("created_at") or datetime.now(timezone.utc),
        )


@dataclass(frozen=True)
class AccountListing:
    """Result of listing a keystore: account names only, never secrets."""

    accounts: list[str] = field(default_factory=list)
    default: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "accounts": list(self.accounts),
            "default": self.default,
        }
