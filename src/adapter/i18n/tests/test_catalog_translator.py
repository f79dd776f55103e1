"""Tests for CatalogTranslator."""

import unittest

from adapter.i18n.catalog_translator import CatalogTranslator


class TestCatalogTranslator(unittest.TestCase):

    def setUp(self):
        self.translator = CatalogTranslator({'opensignup': {
            'Email already exists': 'E-Mail existiert bereits',
            'Welcome to {brandName}!': 'Willkommen bei {brandName}!',
        }})

    def test_translates_known_text(self):
        self.assertEqual(
            self.translator.translate('Email already exists', 'opensignup'),
            'E-Mail existiert bereits',
        )

    def test_falls_back_to_source_text(self):
        self.assertEqual(self.translator.translate('Invalid token', 'opensignup'), 'Invalid token')
        self.assertEqual(
            self.translator.translate('Email already exists', 'other'),
            'Email already exists',
        )

    def test_substitutes_variables(self):
        self.assertEqual(
            self.translator.translate('Welcome to {brandName}!', 'opensignup', {'brandName': 'Acme'}),
            'Willkommen bei Acme!',
        )

    def test_unknown_placeholders_are_kept(self):
        self.assertEqual(
            CatalogTranslator().translate('{a} and {b}', 'opensignup', {'a': 1}),
            '1 and {b}',
        )


if __name__ == '__main__':
    unittest.main()
