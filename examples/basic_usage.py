#!/usr/bin/env python3
"""Example usage of the dotns keystore: store accounts, pick one, resolve it."""

import tempfile

from dotns_keystore import (
    AuthInputs,
    CredentialResolver,
    EnvironmentSnapshot,
    KeystoreManager,
    KeyUri,
    Mnemonic,
)


def main():
    """Demonstrate the account lifecycle and credential resolution."""

    with tempfile.TemporaryDirectory() as keystore_dir:
        print(f"Using temporary keystore: {keystore_dir}")
        password = "correct horse battery staple"

        manager = KeystoreManager(keystore_dir)

        # The first account stored becomes the default
        manager.set_account("alice", password, KeyUri("//Alice"))
        manager.set_account(
            "treasury",
            password,
            Mnemonic("bottom drive obey lake curtain smoke basket hold race lonely fit walk"),
        )

        listing = manager.list_accounts(password)
        print(f"Accounts: {listing.accounts}")
        print(f"Default: {listing.default}")

        manager.use_account("treasury")
        print(f"Default is now: {manager.get_default_account()}")

        # Flags win over the environment, and both win over the keystore
        resolver = CredentialResolver()
        resolved = resolver.resolve_auth(
            AuthInputs(keystore_path=keystore_dir, password=password),
            EnvironmentSnapshot.capture({}),
        )
        print(f"Resolved {resolved.credential!r} from {resolved.source} (account: {resolved.account})")

        manager.remove_account("treasury")
        print(f"Default after removal: {manager.get_default_account()}")

        manager.clear()
        print(f"Accounts after clear: {manager.list_accounts(password).accounts}")


if __name__ == "__main__":
    main()
