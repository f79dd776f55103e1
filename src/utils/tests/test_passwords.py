"""Tests for bcrypt password hashing."""

import unittest

import bcrypt

from utils.passwords import BCRYPT_ROUNDS, hash_password


class TestHashPassword(unittest.TestCase):

    def test_hash_matches_password(self):
        hashed = hash_password('secret123')

        self.assertNotEqual(hashed, 'secret123')
        self.assertTrue(hashed.startswith(f'$2b${BCRYPT_ROUNDS}$'))
        self.assertTrue(bcrypt.checkpw(b'secret123', hashed.encode()))
        self.assertFalse(bcrypt.checkpw(b'secret124', hashed.encode()))

    def test_hashes_are_salted(self):
        self.assertNotEqual(hash_password('secret123'), hash_password('secret123'))


if __name__ == '__main__':
    unittest.main()
