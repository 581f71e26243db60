"""Tests for the PayloadCipher service."""

import dataclasses
import unittest

from dotns_keystore.exceptions import DecryptionError, UnsupportedRecordError
from dotns_keystore.models import AccountPayload, EncryptedAccountRecord
from dotns_keystore.services.payload_cipher import PayloadCipher
from tests.test_utility import TestDataHelper


def _flip_first_bit(value: bytes) -> bytes:
    return bytes([value[0] ^ 0x01]) + value[1:]


class TestPayloadCipher(unittest.TestCase):
    """Test cases for PayloadCipher."""

    def setUp(self):
        self.cipher = PayloadCipher(TestDataHelper.create_fast_config())
        self.password = TestDataHelper.TEST_PASSWORD
        self.payload = AccountPayload(
            account="alice",
            credential=TestDataHelper.create_test_mnemonic(),
        )

    def test_encrypt_decrypt(self):
        """Test that a payload decrypts back to the same account and credential."""
        record = self.cipher.encrypt(self.payload, self.password)
        decrypted = self.cipher.decrypt(record, self.password)

        self.assertEqual(decrypted.account, "alice")
        self.assertEqual(decrypted.credential, self.payload.credential)

    def test_record_does_not_contain_plaintext_secret(self):
        record = self.cipher.encrypt(self.payload, self.password)

        self.assertNotIn(TestDataHelper.TEST_MNEMONIC.encode(), record.ciphertext)
        self.assertNotIn(TestDataHelper.TEST_MNEMONIC, str(record.to_dict()))

    def test_encryption_is_not_deterministic(self):
        """Test that fresh salt and nonce are drawn on every call."""
        first = self.cipher.encrypt(self.payload, self.password)
        second = self.cipher.encrypt(self.payload, self.password)

        self.assertNotEqual(first.ciphertext, second.ciphertext)
        self.assertNotEqual(first.kdf.salt, second.kdf.salt)
        self.assertNotEqual(first.cipher.nonce, second.cipher.nonce)

    def test_kdf_parameters_are_persisted(self):
        record = self.cipher.encrypt(self.payload, self.password)

        self.assertEqual(record.kdf.cost, TestDataHelper.create_fast_config().scrypt_cost)
        self.assertEqual(record.kdf.block_size, 8)
        self.assertEqual(record.kdf.parallelization, 1)

    def test_wrong_password_and_tampering_are_indistinguishable(self):
        """Test that every decryption failure surfaces the same error and message."""
        record = self.cipher.encrypt(self.payload, self.password)

        failures = [
            (record, TestDataHelper.WRONG_PASSWORD),
            (dataclasses.replace(record, ciphertext=_flip_first_bit(record.ciphertext)), self.password),
            (
                dataclasses.replace(
                    record,
                    cipher=dataclasses.replace(record.cipher, tag=_flip_first_bit(record.cipher.tag)),
                ),
                self.password,
            ),
            (
                dataclasses.replace(
                    record,
                    cipher=dataclasses.replace(record.cipher, nonce=_flip_first_bit(record.cipher.nonce)),
                ),
                self.password,
            ),
            (
                dataclasses.replace(
                    record,
                    kdf=dataclasses.replace(record.kdf, salt=_flip_first_bit(record.kdf.salt)),
                ),
                self.password,
            ),
            (dataclasses.replace(record, account="mallory"), self.password),
        ]

        messages = set()
        for tampered, password in failures:
            with self.assertRaises(DecryptionError) as cm:
                self.cipher.decrypt(tampered, password)
            self.assertIs(type(cm.exception), DecryptionError)
            messages.add(str(cm.exception))

        self.assertEqual(messages, {DecryptionError.generic_message})

    def test_decrypt_rejects_out_of_range_kdf_cost(self):
        """Test that a forged record cannot demand an unbounded scrypt cost."""
        record = self.cipher.encrypt(self.payload, self.password)
        forged = dataclasses.replace(record, kdf=dataclasses.replace(record.kdf, cost=1 << 30))

        with self.assertRaises(DecryptionError) as cm:
            self.cipher.decrypt(forged, self.password)
        self.assertEqual(str(cm.exception), DecryptionError.generic_message)

    def test_decrypt_rejects_unsupported_version(self):
        record = self.cipher.encrypt(self.payload, self.password)

        with self.assertRaises(UnsupportedRecordError) as cm:
            self.cipher.decrypt(dataclasses.replace(record, version=99), self.password)
        self.assertEqual(str(cm.exception), DecryptionError.generic_message)

    def test_decrypt_rejects_unsupported_cipher(self):
        record = self.cipher.encrypt(self.payload, self.password)
        other = dataclasses.replace(record, cipher=dataclasses.replace(record.cipher, name="chacha20"))

        with self.assertRaises(UnsupportedRecordError) as cm:
            self.cipher.decrypt(other, self.password)
        self.assertNotIn("chacha20", str(cm.exception))

    def test_record_fields_with_wrong_types_are_rejected_on_load(self):
        """Test that mistyped plaintext fields never reach the cipher."""
        data = self.cipher.encrypt(self.payload, self.password).to_dict()
        for value in (5, None):
            with self.subTest(field="account", value=value):
                with self.assertRaises(ValueError):
                    EncryptedAccountRecord.from_dict({**data, "account": value})

        for key, value in [("cost", "many"), ("salt", 5), ("length", None)]:
            with self.subTest(field=f"kdf.{key}", value=value):
                with self.assertRaises((ValueError, TypeError)):
                    EncryptedAccountRecord.from_dict({**data, "kdf": {**data["kdf"], key: value}})

    def test_swapped_account_field_fails_generically(self):
        record = self.cipher.encrypt(self.payload, self.password)
        other = self.cipher.encrypt(AccountPayload(account="bob", credential=self.payload.credential), self.password)

        with self.assertRaises(DecryptionError) as cm:
            self.cipher.decrypt(dataclasses.replace(record, account=other.account), self.password)
        self.assertEqual(str(cm.exception), DecryptionError.generic_message)

    def test_records_from_older_cost_still_decrypt(self):
        """Test that decryption follows the persisted parameters, not the current config."""
        record = self.cipher.encrypt(self.payload, self.password)
        newer = PayloadCipher(dataclasses.replace(TestDataHelper.create_fast_config(), scrypt_cost=2048))

        self.assertEqual(newer.decrypt(record, self.password).account, "alice")


if __name__ == "__main__":
    unittest.main()
