"""Library-wide constants.

These constants centralize tunable values used across modules so the
validator, cipher, file store and CLI agree on limits and names.
"""


class Constants:

    # Account name policy
    _MAX_ACCOUNT_NAME_LENGTH: int = 255
    _PATH_SEPARATORS: str = "/\\"
    _RESERVED_CHARACTERS: str = '<>:"|?*'
    _DEFAULT_ACCOUNT_NAME: str = "default"

    # Key derivation (scrypt)
    _KDF_NAME: str = "scrypt"
    _DEFAULT_SCRYPT_COST: int = 1 << 15
    _MIN_SCRYPT_COST: int = 1 << 10
    _MAX_SCRYPT_COST: int = 1 << 20
    _SCRYPT_BLOCK_SIZE: int = 8
    _SCRYPT_PARALLELIZATION: int = 1
    _MAX_SCRYPT_PARALLELIZATION: int = 16
    _MAX_SCRYPT_MEMORY: int = 256 * 1024 * 1024
    _SALT_SIZE: int = 16
    _KEY_SIZE_BYTES: int = 32

    # Authenticated cipher
    _CIPHER_NAME: str = "aes-256-gcm"
    _NONCE_SIZE: int = 12
    _TAG_SIZE: int = 16

    # Record format
    _RECORD_VERSION: int = 1
    _PAYLOAD_VERSION: int = 1

    # Keystore layout
    _ACCOUNT_FILE_SUFFIX: str = ".json"
    _DEFAULT_POINTER_FILE: str = ".default"
    _TEMP_FILE_SUFFIX: str = ".tmp"

    # Environment variables
    _ENV_KEYSTORE_PATH: str = "DOTNS_KEYSTORE_PATH"
    _ENV_KEYSTORE_PASSWORD: str = "DOTNS_KEYSTORE_PASSWORD"
    _ENV_MNEMONIC: str = "DOTNS_MNEMONIC"
    _ENV_KEY_URI: str = "DOTNS_KEY_URI"

    @classmethod
    def MAX_ACCOUNT_NAME_LENGTH(cls) -> int:
        return cls._MAX_ACCOUNT_NAME_LENGTH

    @classmethod
    def PATH_SEPARATORS(cls) -> str:
        return cls._PATH_SEPARATORS

    @classmethod
    def RESERVED_CHARACTERS(cls) -> str:
        return cls._RESERVED_CHARACTERS

    @classmethod
    def DEFAULT_ACCOUNT_NAME(cls) -> str:
        return cls._DEFAULT_ACCOUNT_NAME

    @classmethod
    def KDF_NAME(cls) -> str:
        return cls._KDF_NAME

    # Scrypt CPU/memory cost (N)
    @classmethod
    def DEFAULT_SCRYPT_COST(cls) -> int:
        return cls._DEFAULT_SCRYPT_COST

    @classmethod
    def MIN_SCRYPT_COST(cls) -> int:
        return cls._MIN_SCRYPT_COST

    @classmethod
    def MAX_SCRYPT_COST(cls) -> int:
        return cls._MAX_SCRYPT_COST

    @classmethod
    def SCRYPT_BLOCK_SIZE(cls) -> int:
        return cls._SCRYPT_BLOCK_SIZE

    @classmethod
    def SCRYPT_PARALLELIZATION(cls) -> int:
        return cls._SCRYPT_PARALLELIZATION

    @classmethod
    def MAX_SCRYPT_PARALLELIZATION(cls) -> int:
        return cls._MAX_SCRYPT_PARALLELIZATION

    # Upper bound on scrypt memory (128 * N * r bytes) accepted from a record
    @classmethod
    def MAX_SCRYPT_MEMORY(cls) -> int:
        return cls._MAX_SCRYPT_MEMORY

    @classmethod
    def SALT_SIZE(cls) -> int:
        return cls._SALT_SIZE

    # Key size in bytes (AES-256)
    @classmethod
    def KEY_SIZE_BYTES(cls) -> int:
        return cls._KEY_SIZE_BYTES

    @classmethod
    def CIPHER_NAME(cls) -> str:
        return cls._CIPHER_NAME

    @classmethod
    def NONCE_SIZE(cls) -> int:
        return cls._NONCE_SIZE

    @classmethod
    def TAG_SIZE(cls) -> int:
        return cls._TAG_SIZE

    @classmethod
    def RECORD_VERSION(cls) -> int:
        return cls._RECORD_VERSION

    @classmethod
    def PAYLOAD_VERSION(cls) -> int:
        return cls._PAYLOAD_VERSION

    @classmethod
    def ACCOUNT_FILE_SUFFIX(cls) -> str:
        return cls._ACCOUNT_FILE_SUFFIX

    @classmethod
    def DEFAULT_POINTER_FILE(cls) -> str:
        return cls._DEFAULT_POINTER_FILE

    @classmethod
    def TEMP_FILE_SUFFIX(cls) -> str:
        return cls._TEMP_FILE_SUFFIX

    @classmethod
    def ENV_KEYSTORE_PATH(cls) -> str:
        return cls._ENV_KEYSTORE_PATH

    @classmethod
    def ENV_KEYSTORE_PASSWORD(cls) -> str:
        return cls._ENV_KEYSTORE_PASSWORD

    @classmethod
    def ENV_MNEMONIC(cls) -> str:
        return cls._ENV_MNEMONIC

    @classmethod
    def ENV_KEY_URI(cls) -> str:
        return cls._ENV_KEY_URI
