"""Tests for the KeystoreManager class."""

import json
import unittest
from pathlib import Path
from unittest.mock import patch

from dotns_keystore.exceptions import (
    AccountNameCollisionError,
    AccountNameDotError,
    AccountNameEdgeDotError,
    AccountNamePathSeparatorError,
    AccountNameSpecialCharacterError,
    AccountNameTooLongError,
    AccountNotFoundError,
    DecryptionError,
    FileOperationError,
    MissingPasswordError,
)
from dotns_keystore.models import KeyUri, Mnemonic
from tests.test_utility import TestDataHelper, TestUtilities


class TestKeystoreManager(unittest.TestCase):
    """Test cases for KeystoreManager."""

    def setUp(self):
        self.temp_dir = TestUtilities.create_temp_keystore_dir()
        self.keystore_dir = Path(self.temp_dir) / "keystore"
        self.manager = TestUtilities.create_test_manager(str(self.keystore_dir))
        self.password = TestDataHelper.TEST_PASSWORD

    def tearDown(self):
        TestUtilities.cleanup_temp_dir(self.temp_dir)

    def _assert_nothing_written(self):
        self.assertFalse(self.keystore_dir.exists() and any(self.keystore_dir.iterdir()))

    def test_first_account_becomes_default(self):
        became_default = self.manager.set_account("alice", self.password, KeyUri("//Alice"))

        self.assertTrue(became_default)
        self.assertEqual(self.manager.get_default_account(), "alice")

    def test_second_account_keeps_existing_default(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))
        became_default = self.manager.set_account("bob", self.password, KeyUri("//Bob"))

        self.assertFalse(became_default)
        self.assertEqual(self.manager.get_default_account(), "alice")

    def test_make_default(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))
        became_default = self.manager.set_account("bob", self.password, KeyUri("//Bob"), make_default=True)

        self.assertTrue(became_default)
        self.assertEqual(self.manager.get_default_account(), "bob")

    def test_set_rejects_invalid_names_without_touching_disk(self):
        cases = [
            ("a/b", AccountNamePathSeparatorError),
            ("a\\b", AccountNamePathSeparatorError),
            (".", AccountNameDotError),
            ("..", AccountNameDotError),
            (".hidden", AccountNameEdgeDotError),
            ("name.", AccountNameEdgeDotError),
            ("a|b", AccountNameSpecialCharacterError),
            ("x" * 256, AccountNameTooLongError),
        ]
        for name, error in cases:
            with self.subTest(name=name[:20]):
                with self.assertRaises(error):
                    self.manager.set_account(name, self.password, KeyUri("//Alice"))
        self._assert_nothing_written()

    def test_set_requires_password(self):
        with self.assertRaises(MissingPasswordError):
            self.manager.set_account("alice", "", KeyUri("//Alice"))
        self._assert_nothing_written()

    def test_overwrite_with_same_password(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))
        self.manager.set_account("alice", self.password, Mnemonic("a b c"))

        self.assertEqual(self.manager.list_accounts(self.password).accounts, ["alice"])

    def test_overwrite_with_wrong_password_is_refused(self):
        """Test that an existing record is only replaced by someone who can open it."""
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))
        before = self.manager.file_store.account_file_path("alice").read_bytes()

        with self.assertRaises(DecryptionError):
            self.manager.set_account("alice", TestDataHelper.WRONG_PASSWORD, KeyUri("//Mallory"))

        self.assertEqual(self.manager.file_store.account_file_path("alice").read_bytes(), before)

    def test_sanitized_name_collision_is_refused(self):
        self.manager.set_account("a_b", self.password, KeyUri("//Alice"))

        with self.assertRaises(AccountNameCollisionError) as cm:
            self.manager.set_account("a b", self.password, KeyUri("//Bob"))
        self.assertIn("collides", str(cm.exception))

    def test_remove_colliding_name_keeps_other_account(self):
        """Test that remove only deletes the record sealed under the exact name."""
        self.manager.set_account("a_b", self.password, KeyUri("//Alice"))

        with self.assertRaises(AccountNotFoundError) as cm:
            self.manager.remove_account("a b")
        self.assertIn("Account not found", str(cm.exception))

        self.assertEqual(self.manager.list_accounts(self.password).accounts, ["a_b"])
        self.assertEqual(self.manager.get_default_account(), "a_b")

    def test_use_colliding_name_keeps_default(self):
        self.manager.set_account("a_b", self.password, KeyUri("//Alice"))

        with self.assertRaises(AccountNotFoundError) as cm:
            self.manager.use_account("a b")
        self.assertIn("Account not found", str(cm.exception))

        self.assertEqual(self.manager.get_default_account(), "a_b")

    def test_tampered_plaintext_fields_fail_as_decryption_error(self):
        """Test that edits to the unencrypted record fields give the generic error."""
        tamperings = {
            "account_type": lambda data: data.update(account=5),
            "kdf_cost_type": lambda data: data["kdf"].update(cost="many"),
            "kdf_block_size_missing": lambda data: data["kdf"].update(block_size=None),
            "kdf_salt_type": lambda data: data["kdf"].update(salt=5),
            "kdf_not_object": lambda data: data.update(kdf="scrypt"),
            "cipher_nonce_type": lambda data: data["cipher"].update(nonce=[1, 2, 3]),
            "kdf_name": lambda data: data["kdf"].update(name="argon2id"),
            "version": lambda data: data.update(version=2),
        }
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))
        record_path = self.manager.file_store.account_file_path("alice")
        original = record_path.read_text(encoding="utf-8")

        for label, tamper in tamperings.items():
            with self.subTest(tampering=label):
                data = json.loads(original)
                tamper(data)
                record_path.write_text(json.dumps(data), encoding="utf-8")

                with self.assertRaises(DecryptionError) as cm:
                    self.manager.list_accounts(self.password)
                self.assertEqual(str(cm.exception), DecryptionError.generic_message)

    def test_failed_write_does_not_move_default(self):
        """Test that the pointer is only updated after the record is written."""
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))

        with patch.object(self.manager.file_store, "write", side_effect=FileOperationError("disk full")):
            with self.assertRaises(FileOperationError):
                self.manager.set_account("bob", self.password, KeyUri("//Bob"), make_default=True)

        self.assertEqual(self.manager.get_default_account(), "alice")

    def test_list_returns_canonical_names_only(self):
        self.manager.set_account("my account", self.password, TestDataHelper.create_test_mnemonic())
        self.manager.set_account("bob", self.password, KeyUri("//Bob"))

        listing = self.manager.list_accounts(self.password)

        self.assertEqual(listing.accounts, ["bob", "my account"])
        self.assertEqual(listing.default, "my account")
        self.assertNotIn(TestDataHelper.TEST_MNEMONIC, str(listing.to_dict()))
        self.assertNotIn("//Bob", str(listing.to_dict()))

    def test_list_empty_keystore_needs_no_password(self):
        listing = self.manager.list_accounts(None)

        self.assertEqual(listing.accounts, [])
        self.assertIsNone(listing.default)

    def test_list_requires_password_when_accounts_exist(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))

        with self.assertRaises(MissingPasswordError):
            self.manager.list_accounts(None)

    def test_list_with_wrong_password(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))

        with self.assertRaises(DecryptionError):
            self.manager.list_accounts(TestDataHelper.WRONG_PASSWORD)

    def test_use_account(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))
        self.manager.set_account("bob", self.password, KeyUri("//Bob"))

        self.manager.use_account("bob")

        self.assertEqual(self.manager.get_default_account(), "bob")

    def test_use_missing_account(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))

        with self.assertRaises(AccountNotFoundError) as cm:
            self.manager.use_account("ghost")
        self.assertIn("Account not found", str(cm.exception))
        self.assertEqual(self.manager.get_default_account(), "alice")

    def test_remove_non_default_account(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))
        self.manager.set_account("bob", self.password, KeyUri("//Bob"))

        cleared = self.manager.remove_account("bob")

        self.assertFalse(cleared)
        self.assertEqual(self.manager.get_default_account(), "alice")
        self.assertEqual(self.manager.list_accounts(self.password).accounts, ["alice"])

    def test_remove_default_account_clears_pointer(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))
        self.manager.set_account("bob", self.password, KeyUri("//Bob"))

        cleared = self.manager.remove_account("alice")

        self.assertTrue(cleared)
        self.assertIsNone(self.manager.get_default_account())

    def test_remove_missing_account(self):
        with self.assertRaises(AccountNotFoundError) as cm:
            self.manager.remove_account("ghost")
        self.assertIn("Account not found", str(cm.exception))

    def test_remove_invalid_name(self):
        with self.assertRaises(AccountNamePathSeparatorError):
            self.manager.remove_account("../alice")

    def test_set_after_default_removed_takes_default(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))
        self.manager.set_account("bob", self.password, KeyUri("//Bob"))
        self.manager.remove_account("alice")

        self.manager.set_account("carol", self.password, KeyUri("//Carol"))

        self.assertEqual(self.manager.get_default_account(), "carol")

    def test_clear(self):
        self.manager.set_account("alice", self.password, KeyUri("//Alice"))
        self.manager.set_account("bob", self.password, KeyUri("//Bob"))

        self.manager.clear()

        listing = self.manager.list_accounts(self.password)
        self.assertEqual(listing.accounts, [])
        self.assertIsNone(listing.default)
        self.manager.clear()

    def test_clear_never_created_keystore(self):
        self.manager.clear()
        self.manager.clear()
        self.assertEqual(self.manager.list_accounts(None).accounts, [])


if __name__ == "__main__":
    unittest.main()
