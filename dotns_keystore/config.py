"""Configuration management for the dotns keystore."""

import os
from dataclasses import dataclass

from dotns_keystore.constants import Constants


def default_keystore_dir() -> str:
    """Compute the default keystore directory (``~/.dotns/keystore``)."""
    home = os.path.expanduser("~")
    if home and home != "~":
        return os.path.join(home, ".dotns", "keystore")

    # Fallback to current directory
    return os.path.join(os.getcwd(), ".dotns", "keystore")


def is_power_of_two(value: int) -> bool:
    return value > 1 and (value & (value - 1)) == 0


@dataclass(frozen=True)
class KeystoreConfig:
    """Configuration for keystore encryption and file handling."""

    # Key derivation settings
    scrypt_cost: int = Constants.DEFAULT_SCRYPT_COST()
    scrypt_block_size: int = Constants.SCRYPT_BLOCK_SIZE()
    scrypt_parallelization: int = Constants.SCRYPT_PARALLELIZATION()
    salt_size: int = Constants.SALT_SIZE()

    # File settings
    secure_permissions: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not is_power_of_two(self.scrypt_cost):
            raise ValueError("scrypt_cost must be a power of two greater than 1")
        if self.scrypt_cost < Constants.MIN_SCRYPT_COST():
            raise ValueError(f"scrypt_cost must be at least {Constants.MIN_SCRYPT_COST()}")
        if self.scrypt_cost > Constants.MAX_SCRYPT_COST():
            raise ValueError(f"scrypt_cost must be at most {Constants.MAX_SCRYPT_COST()}")
        if self.scrypt_block_size < 1:
            raise ValueError("scrypt_block_size must be at least 1")
        if self.scrypt_parallelization < 1:
            raise ValueError("scrypt_parallelization must be at least 1")
        if self.salt_size < Constants.SALT_SIZE():
            raise ValueError(f"salt_size must be at least {Constants.SALT_SIZE()} bytes")


# Default configuration instance
DEFAULT_CONFIG = KeystoreConfig()
