"""Tests for login_bridge."""

import unittest

from adapter.fake.session_service import FakeSessionService
from adapter.fake.user_store import FakeUserStore
from adapter.i18n.catalog_translator import CatalogTranslator
from domain.model.config import ConfirmEmailsOptions, SignupOptions
from domain.model.errors import DomainError
from domain.model.resource import AuthResource, ColumnType, ResourceColumn
from domain.model.signup import LoginResult, RequestContext
from domain.model.user import Identity
from adapter.fake.email_sender import FakeEmailAdapter
from services.config_validator import validate_config
from services.login_bridge import do_login, reject_unconfirmed_email

USERS = AuthResource('users', columns=(
    ResourceColumn('id', ColumnType.STRING, primary_key=True),
    ResourceColumn('email', ColumnType.STRING),
    ResourceColumn('password', ColumnType.STRING, virtual=True),
    ResourceColumn('password_hash', ColumnType.STRING),
    ResourceColumn('email_confirmed', ColumnType.BOOLEAN),
))

CONFIG = validate_config(
    SignupOptions(
        email_field='email', password_field='password', password_hash_field='password_hash',
        confirm_emails=ConfirmEmailsOptions(FakeEmailAdapter(), 'email_confirmed'),
    ),
    [USERS], 'users', 'Acme',
)


class TestDoLogin(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = FakeUserStore()
        self.sessions = FakeSessionService()
        self.store.create({'id': 'u1', 'email': 'a@b.com', 'email_confirmed': True})

    async def _login(self, email='a@b.com'):
        return await do_login(
            email, None, RequestContext(),
            config=CONFIG, store=self.store, sessions=self.sessions,
        )

    async def test_establishes_session_for_identity(self):
        result = await self._login()

        self.assertEqual(result, LoginResult(allowed_login=True, error=''))
        identity = self.sessions.sessions[0]
        self.assertEqual(identity.pk, 'u1')
        self.assertEqual(identity.username, 'a@b.com')
        self.assertEqual(identity.record['email'], 'a@b.com')

    async def test_callbacks_can_redirect(self):
        async def redirect(identity, result, response, context):
            result.redirect_to = '/welcome'

        self.sessions.login_callbacks.append(redirect)

        result = await self._login()

        self.assertEqual(result.to_dict(), {'allowedLogin': True, 'redirectTo': '/welcome'})
        self.assertEqual(len(self.sessions.sessions), 1)

    async def test_missing_record_is_unexpected(self):
        with self.assertRaises(DomainError):
            await self._login('ghost@b.com')


class TestRejectUnconfirmedEmail(unittest.IsolatedAsyncioTestCase):

    async def test_denies_unconfirmed_record(self):
        callback = reject_unconfirmed_email(CONFIG, CatalogTranslator())
        result = LoginResult()

        await callback(Identity('u1', 'a@b.com', {'email_confirmed': False}), result, None, RequestContext())

        self.assertFalse(result.allowed_login)
        self.assertEqual(result.error, 'Email is not confirmed')

    async def test_allows_confirmed_record(self):
        callback = reject_unconfirmed_email(CONFIG, CatalogTranslator())
        result = LoginResult()

        await callback(Identity('u1', 'a@b.com', {'email_confirmed': True}), result, None, RequestContext())

        self.assertTrue(result.allowed_login)


if __name__ == '__main__':
    unittest.main()
