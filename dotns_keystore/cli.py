#!/usr/bin/env python3
"""Command-line interface for the dotns keystore."""

import argparse
import getpass
import json
import sys
from typing import Any, Optional

from dotns_keystore.config import KeystoreConfig
from dotns_keystore.constants import Constants
from dotns_keystore.exceptions import (
    KeystoreError,
    MissingPasswordError,
    ValidationError,
)
from dotns_keystore.keystore_manager import KeystoreManager
from dotns_keystore.models import Credential, KeyUri, Mnemonic
from dotns_keystore.services import AuthInputs, CredentialResolver, EnvironmentSnapshot
from dotns_keystore.validation_utils import validate_account_name


class KeystoreCLI:
    """Command-line interface for the keystore."""

    def __init__(self) -> None:
        """Initialize the CLI."""
        self._parser = self._create_parser()
        self._pretty = False
        self._env = EnvironmentSnapshot()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            prog="dotns-keystore",
            description="Encrypted keystore for dotns signing accounts",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=f"""
Environment:
  {Constants.ENV_KEYSTORE_PATH()}      keystore directory (default: ~/.dotns/keystore)
  {Constants.ENV_KEYSTORE_PASSWORD()}  keystore password
  {Constants.ENV_MNEMONIC()}           mnemonic phrase
  {Constants.ENV_KEY_URI()}            key URI

Examples:
  # Store a key URI under an account and make it the default
  dotns-keystore --password "pw" set --account alice -k //Alice --default

  # List account names (secrets are never printed)
  dotns-keystore --password "pw" list

  # Switch the default account
  dotns-keystore use bob

  # Show which credential a signing command would use
  dotns-keystore --password "pw" resolve

  # Remove one account, or everything
  dotns-keystore remove bob
  dotns-keystore clear
            """,
        )

        # Global arguments
        parser.add_argument(
            "--keystore-path",
            help=f"Keystore directory (env: {Constants.ENV_KEYSTORE_PATH()})",
        )
        parser.add_argument(
            "--password",
            help=f"Keystore password (env: {Constants.ENV_KEYSTORE_PASSWORD()})",
        )
        parser.add_argument(
            "--kdf-cost",
            type=int,
            help=f"scrypt cost for new records (power of two, minimum: {Constants.MIN_SCRYPT_COST():,}, default: {Constants.DEFAULT_SCRYPT_COST():,})",
        )
        parser.add_argument(
            "--pretty",
            action="store_true",
            help="Pretty-print JSON outputs",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command",
            help="Available commands",
        )

        # Set command
        set_parser = subparsers.add_parser(
            "set",
            help="Encrypt and store a mnemonic or key URI under an account name",
        )
        set_parser.add_argument(
            "--account",
            default=Constants.DEFAULT_ACCOUNT_NAME(),
            help=f"Account name to store under (default: {Constants.DEFAULT_ACCOUNT_NAME()})",
        )
        self._add_secret_arguments(set_parser)
        set_parser.add_argument(
            "--default",
            action="store_true",
            dest="make_default",
            help="Make this account the default",
        )

        # List command
        subparsers.add_parser(
            "list",
            help="List stored account names (does not reveal secrets)",
        )

        # Use command
        use_parser = subparsers.add_parser(
            "use",
            help="Set the default account",
        )
        use_parser.add_argument("account", help="Account name")

        # Remove command
        remove_parser = subparsers.add_parser(
            "remove",
            help="Remove a stored account",
        )
        remove_parser.add_argument("account", help="Account name")

        # Clear command
        subparsers.add_parser(
            "clear",
            help="Delete all stored accounts",
        )

        # Resolve command
        resolve_parser = subparsers.add_parser(
            "resolve",
            help="Show which credential would be used for signing (without printing it)",
        )
        resolve_parser.add_argument(
            "--account",
            help="Keystore account name (default: keystore default)",
        )
        self._add_secret_arguments(resolve_parser)

        return parser

    @staticmethod
    def _add_secret_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "-m",
            "--mnemonic",
            help=f"Mnemonic phrase (env: {Constants.ENV_MNEMONIC()})",
        )
        parser.add_argument(
            "-k",
            "--key-uri",
            help=f"Key URI (env: {Constants.ENV_KEY_URI()})",
        )

    def _get_config(self, kdf_cost: int | None) -> KeystoreConfig:
        if kdf_cost is None:
            return KeystoreConfig()
        try:
            return KeystoreConfig(scrypt_cost=kdf_cost)
        except ValueError as e:
            raise ValidationError(f"Invalid --kdf-cost: {e}") from e

    def _get_manager(self, args: argparse.Namespace) -> KeystoreManager:
        """Get KeystoreManager instance based on arguments."""
        return KeystoreManager(
            self._keystore_dir(args),
            config=self._get_config(args.kdf_cost),
        )

    def _keystore_dir(self, args: argparse.Namespace) -> str:
        return str(CredentialResolver.keystore_dir(
            AuthInputs(keystore_path=args.keystore_path),
            self._env,
        ))

    def _auth_inputs(self, args: argparse.Namespace) -> AuthInputs:
        return AuthInputs(
            mnemonic=getattr(args, "mnemonic", None),
            key_uri=getattr(args, "key_uri", None),
            keystore_path=args.keystore_path,
            password=args.password,
            account=getattr(args, "account", None),
        )

    def _resolve_password(
        self,
        password: str | None,
        *,
        confirm: bool = False
    ) -> Optional[str]:
        """Pick the keystore password: flag, then environment, then a TTY prompt.

        Args:
            password: Password given on the command line
            confirm: Ask twice when prompting (for new keystores)

        Returns:
            The password, or None when none is available non-interactively
        """
        if password:
            return password
        if self._env.password:
            return self._env.password
        if not sys.stdin.isatty():
            return None

        entered = getpass.getpass("Keystore password: ")
        if confirm and entered != getpass.getpass("Confirm password: "):
            raise ValidationError("Passwords do not match")
        return entered or None

    def _prompt_credential(self) -> Credential:
        """Ask for the secret to store when none was given."""
        if not sys.stdin.isatty():
            raise ValidationError(
                f"Provide a mnemonic (-m / {Constants.ENV_MNEMONIC()}) "
                f"or a key URI (-k / {Constants.ENV_KEY_URI()}) to store"
            )

        choice = input("Store (mnemonic/key-uri): ").strip().lower()
        if choice == "mnemonic":
            phrase = getpass.getpass("Mnemonic: ")
            if not phrase:
                raise ValidationError("Empty mnemonic")
            return Mnemonic(phrase)
        if choice in ("key-uri", "keyuri"):
            uri = getpass.getpass("Key URI: ")
            if not uri:
                raise ValidationError("Empty key URI")
            return KeyUri(uri)
        raise ValidationError("Invalid choice (use mnemonic or key-uri)")

    def _print_json(self, payload: dict[str, Any]) -> None:
        """Print a JSON payload to stdout."""
        print(json.dumps(payload, indent=2 if self._pretty else None))

    def _print_error(self, *, message: str, code: str = "error") -> None:
        """Print a JSON error to stderr and exit non-zero."""
        error_obj = {
            "success": False,
            "error_code": code,
            "message": message,
        }
        print(json.dumps(error_obj, indent=2), file=sys.stderr)
        sys.exit(1)

    def _handle_set(self, args: argparse.Namespace) -> None:
        """Handle set command."""
        validate_account_name(args.account)
        manager = self._get_manager(args)

        # Flags and environment are merged by the resolver; the keystore is not consulted
        resolved = CredentialResolver().resolve_auth(
            self._auth_inputs(args),
            self._env,
            require_auth=False,
        )
        credential = resolved.credential if resolved else self._prompt_credential()

        is_new = not manager.file_store.exists(args.account)
        password = self._resolve_password(args.password, confirm=is_new)
        if password is None:
            raise MissingPasswordError(
                f"Keystore password required (--password or {Constants.ENV_KEYSTORE_PASSWORD()})"
            )

        is_default = manager.set_account(
            args.account,
            password,
            credential,
            make_default=args.make_default,
        )

        self._print_json({
            "success": True,
            "command": "set",
            "account": args.account,
            "default": is_default,
            "keystore_path": manager.keystore_directory,
        })

    def _handle_list(self, args: argparse.Namespace) -> None:
        """Handle list command."""
        manager = self._get_manager(args)
        exists = manager.file_store.exists_on_disk

        password = None
        if manager.file_store.list_account_files():
            password = self._resolve_password(args.password)
        listing = manager.list_accounts(password)

        self._print_json({
            "success": True,
            "command": "list",
            "keystore_path": manager.keystore_directory,
            "exists": exists,
            **listing.to_dict(),
        })

    def _handle_use(self, args: argparse.Namespace) -> None:
        """Handle use command."""
        manager = self._get_manager(args)
        manager.use_account(args.account)

        self._print_json({
            "success": True,
            "command": "use",
            "account": args.account,
        })

    def _handle_remove(self, args: argparse.Namespace) -> None:
        """Handle remove command."""
        manager = self._get_manager(args)
        default_cleared = manager.remove_account(args.account)

        self._print_json({
            "success": True,
            "command": "remove",
            "account": args.account,
            "default_cleared": default_cleared,
        })

    def _handle_clear(self, args: argparse.Namespace) -> None:
        """Handle clear command."""
        manager = self._get_manager(args)
        manager.clear()

        self._print_json({
            "success": True,
            "command": "clear",
            "keystore_path": manager.keystore_directory,
        })

    def _handle_resolve(self, args: argparse.Namespace) -> None:
        """Handle resolve command."""
        inputs = self._auth_inputs(args)
        resolver = CredentialResolver(self._get_config(args.kdf_cost))
        resolved = resolver.resolve_auth(inputs, self._env)

        self._print_json({
            "success": True,
            "command": "resolve",
            "source": resolved.source,
            "account": resolved.account,
            "kind": resolved.credential.kind,
        })

    def run(self, args: Optional[list[str]] = None, environ: Optional[dict[str, str]] = None) -> None:
        """Run the CLI with given arguments."""
        handlers = {
            "set": self._handle_set,
            "list": self._handle_list,
            "use": self._handle_use,
            "remove": self._handle_remove,
            "clear": self._handle_clear,
            "resolve": self._handle_resolve,
        }
        try:
            parsed_args = self._parser.parse_args(args)
            self._pretty = bool(getattr(parsed_args, "pretty", False))
            self._env = EnvironmentSnapshot.capture(environ)

            if not parsed_args.command:
                self._print_error(message="No command specified", code="missing_command")

            handler = handlers.get(parsed_args.command)
            if handler is None:
                self._print_error(message=f"Unknown command: {parsed_args.command}", code="unknown_command")
            handler(parsed_args)

        except KeystoreError as e:
            self._print_error(message=str(e), code=e.error_code)
        except KeyboardInterrupt:
            self._print_error(message="Operation cancelled by user", code="cancelled")
        except Exception as e:
            self._print_error(message=str(e), code="unexpected_error")


def main() -> None:
    """Main entry point for the CLI."""
    cli = KeystoreCLI()
    cli.run()


if __name__ == "__main__":
    main()
