"""Unit tests for signup_service.signup()."""

import unittest
from unittest.mock import MagicMock

import bcrypt
from jose import jwt

from adapter.fake.email_sender import FakeEmailAdapter
from adapter.fake.session_service import FakeSessionService
from adapter.fake.user_store import FakeUserStore
from adapter.i18n.catalog_translator import CatalogTranslator
from adapter.jose.token_service import JoseTokenService
from domain.model.config import ConfirmEmailsOptions, SignupHooks, SignupOptions
from domain.model.errors import DuplicateError, HookContractError
from domain.model.resource import AuthResource, ColumnType, ResourceColumn, ValidationRule
from domain.model.signup import HookResult, LoginResult, RequestContext, SignupResult
from services.config_validator import validate_config
from services.signup_service import signup

SECRET = 'test-secret'
SIGNUP_URL = 'https://x/signup'

USERS = AuthResource('users', columns=(
    ResourceColumn('id', ColumnType.STRING, primary_key=True),
    ResourceColumn('email', ColumnType.STRING, min_length=6, max_length=40, validation=(
        ValidationRule(r'^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$', 'Email is not valid'),
    )),
    ResourceColumn('password', ColumnType.STRING, virtual=True, min_length=6, max_length=20,
                   validation=(ValidationRule(r'[0-9]', 'Password must contain at least one number'),)),
    ResourceColumn('password_hash', ColumnType.STRING),
    ResourceColumn('email_confirmed', ColumnType.BOOLEAN),
    ResourceColumn('role', ColumnType.STRING),
))


def make_config(confirm: bool = False, hooks: SignupHooks | None = None, adapter=None, allowed_origins=()):
    confirm_emails = None
    if confirm:
        confirm_emails = ConfirmEmailsOptions(
            adapter=adapter or FakeEmailAdapter(),
            email_confirmed_field='email_confirmed',
            send_from='noreply@x',
            allowed_url_origins=allowed_origins,
        )
    options = SignupOptions(
        email_field='email',
        password_field='password',
        password_hash_field='password_hash',
        confirm_emails=confirm_emails,
        default_field_values={'role': 'user'},
        hooks=hooks or SignupHooks(),
    )
    return validate_config(options, [USERS], 'users', 'Acme')


class SignupTestCase(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.store = FakeUserStore()
        self.tokens = JoseTokenService(SECRET)
        self.sessions = FakeSessionService()
        self.translator = CatalogTranslator()
        self.context = RequestContext(body={'email': 'A@B.com'}, request_url=SIGNUP_URL)

    async def _signup(self, config, email='A@B.com', password='secret123', url=SIGNUP_URL, store=None):
        return await signup(
            email, password, url, self.context,
            config=config,
            store=store or self.store,
            tokens=self.tokens,
            sessions=self.sessions,
            translator=self.translator,
        )


class TestSignupWithoutConfirmation(SignupTestCase):
    """Confirmation disabled: signup logs the user in right away."""

    async def test_signup_normalizes_email_and_logs_in(self):
        result = await self._signup(make_config())

        self.assertIsInstance(result, LoginResult)
        self.assertTrue(result.allowed_login)
        record = self.store.get('email', 'a@b.com')
        self.assertIsNotNone(record)
        self.assertTrue(bcrypt.checkpw('secret123'.encode(), record['password_hash'].encode()))
        self.assertEqual(len(self.sessions.sessions), 1)
        self.assertEqual(self.sessions.sessions[0].username, 'a@b.com')
        self.assertEqual(self.sessions.sessions[0].pk, record['id'])

    async def test_default_field_values_are_applied(self):
        await self._signup(make_config())

        record = self.store.get('email', 'a@b.com')
        self.assertEqual(record['role'], 'user')
        self.assertNotIn('email_confirmed', record)

    async def test_case_variant_of_existing_email_is_rejected(self):
        config = make_config()
        await self._signup(config, email='someone@example.com')

        for variant in ('someone@example.com', 'SOMEONE@example.com', 'SomeOne@Example.COM'):
            result = await self._signup(config, email=variant)
            self.assertEqual(result, SignupResult(ok=False, error='Email already exists'))

        self.assertEqual(len(self.store.store), 1)

    async def test_invalid_email_short_circuits(self):
        store = MagicMock()

        result = await self._signup(make_config(), email='not-an-email', store=store)

        self.assertEqual(result.to_dict(), {'error': 'Email is not valid', 'ok': False})
        store.get.assert_not_called()
        store.create.assert_not_called()

    async def test_email_length_bounds_are_enforced(self):
        store = MagicMock()

        too_long = await self._signup(make_config(), email='a' * 29 + '@example.com', store=store)
        too_short = await self._signup(make_config(), email='a@b.c', store=store)

        self.assertEqual(too_long.to_dict(), {'error': 'Email must be at most 40 characters long', 'ok': False})
        self.assertEqual(too_short.error, 'Email must be at least 6 characters long')
        store.get.assert_not_called()

    async def test_email_of_exactly_max_length_is_accepted(self):
        email = 'a' * 28 + '@example.com'

        result = await self._signup(make_config(), email=email)

        self.assertTrue(result.allowed_login)
        self.assertIsNotNone(self.store.get('email', email))

    async def test_password_of_exactly_min_length_is_accepted(self):
        result = await self._signup(make_config(), password='abcd12')

        self.assertIsInstance(result, LoginResult)
        self.assertTrue(result.allowed_login)

    async def test_password_one_shorter_than_min_length_is_rejected(self):
        result = await self._signup(make_config(), password='abc12')

        self.assertEqual(result.error, 'Password must be at least 6 characters long')
        self.assertFalse(result.ok)
        self.assertEqual(self.store.store, {})

    async def test_password_longer_than_max_length_is_rejected(self):
        result = await self._signup(make_config(), password='a1' * 10 + 'x')

        self.assertEqual(result.error, 'Password must be at most 20 characters long')

    async def test_password_rule_failure_is_reported(self):
        result = await self._signup(make_config(), password='abcdefgh')

        self.assertEqual(result.error, 'Password must contain at least one number')

    async def test_missing_password_is_rejected(self):
        result = await self._signup(make_config(), password=None)

        self.assertEqual(result.error, 'Password is required')

    async def test_login_callbacks_can_deny_login(self):
        async def deny(identity, result, response, context):
            result.allowed_login = False
            result.error = 'Account is pending review'

        self.sessions.login_callbacks.append(deny)

        result = await self._signup(make_config())

        self.assertEqual(result.to_dict(), {'allowedLogin': False, 'error': 'Account is pending review'})
        self.assertEqual(self.sessions.sessions, [])
        self.assertIsNotNone(self.store.get('email', 'a@b.com'))

    async def test_duplicate_on_create_is_reported_as_conflict(self):
        store = MagicMock()
        store.get.return_value = None
        store.create.side_effect = DuplicateError("User already exists")

        result = await self._signup(make_config(), store=store)

        self.assertEqual(result.error, 'Email already exists')

    async def test_errors_are_localized(self):
        self.translator = CatalogTranslator({'opensignup': {
            'Email already exists': 'E-Mail existiert bereits',
        }})
        config = make_config()
        await self._signup(config)

        result = await self._signup(config)

        self.assertEqual(result.error, 'E-Mail existiert bereits')


class TestSignupHooks(SignupTestCase):
    """before_user_save / after_user_save contract."""

    async def test_before_hook_error_prevents_creation(self):
        async def block(resource, record, context):
            return HookResult(ok=False, error='blocked')

        result = await self._signup(make_config(hooks=SignupHooks(before_user_save=block)))

        self.assertEqual(result.to_dict(), {'error': 'blocked'})
        self.assertEqual(self.store.store, {})
        self.assertEqual(self.sessions.sessions, [])

    async def test_before_hook_receives_candidate_record_and_context(self):
        calls = []

        async def capture(resource, record, context):
            calls.append((resource, dict(record), context))
            return HookResult(ok=True)

        config = make_config(hooks=SignupHooks(before_user_save=capture))
        await self._signup(config)

        resource, record, context = calls[0]
        self.assertIs(resource, config.resource)
        self.assertEqual(record['email'], 'a@b.com')
        self.assertEqual(record['role'], 'user')
        self.assertIs(context, self.context)

    async def test_before_hook_replacement_record_is_used(self):
        async def replace(resource, record, context):
            return HookResult(ok=True, record={**record, 'role': 'trial'})

        await self._signup(make_config(hooks=SignupHooks(before_user_save=replace)))

        self.assertEqual(self.store.get('email', 'a@b.com')['role'], 'trial')

    async def test_virtual_fields_from_hook_are_not_stored(self):
        async def leak(resource, record, context):
            return HookResult(ok=True, record={**record, 'password': 'secret123'})

        await self._signup(make_config(hooks=SignupHooks(before_user_save=leak)))

        record = self.store.get('email', 'a@b.com')
        self.assertNotIn('password', record)
        self.assertEqual(record['role'], 'user')

    async def test_sync_hook_and_dict_result_are_accepted(self):
        def approve(resource, record, context):
            return {'ok': True}

        result = await self._signup(make_config(hooks=SignupHooks(before_user_save=approve)))

        self.assertTrue(result.allowed_login)

    async def test_before_hook_returning_none_is_a_contract_violation(self):
        async def broken(resource, record, context):
            return None

        with self.assertRaises(HookContractError):
            await self._signup(make_config(hooks=SignupHooks(before_user_save=broken)))

        self.assertEqual(self.store.store, {})

    async def test_failure_without_error_message_is_a_contract_violation(self):
        async def silent(resource, record, context):
            return HookResult(ok=False)

        with self.assertRaises(HookContractError):
            await self._signup(make_config(hooks=SignupHooks(before_user_save=silent)))

    async def test_after_hook_error_is_returned_but_record_stays(self):
        async def reject(resource, record, context):
            return HookResult(error='welcome mail failed')

        result = await self._signup(make_config(hooks=SignupHooks(after_user_save=reject)))

        self.assertEqual(result.to_dict(), {'error': 'welcome mail failed'})
        self.assertIsNotNone(self.store.get('email', 'a@b.com'))
        self.assertEqual(self.sessions.sessions, [])

    async def test_after_hook_receives_created_record(self):
        created = []

        async def capture(resource, record, context):
            created.append(record)
            return HookResult(ok=True)

        await self._signup(make_config(hooks=SignupHooks(after_user_save=capture)))

        self.assertIn('id', created[0])

    async def test_after_hook_contract_violation_raises(self):
        async def broken(resource, record, context):
            return 'ok'

        with self.assertRaises(HookContractError):
            await self._signup(make_config(hooks=SignupHooks(after_user_save=broken)))


class TestSignupWithConfirmation(SignupTestCase):
    """Confirmation enabled: signup mails a token instead of logging in."""

    def setUp(self):
        super().setUp()
        self.mailer = FakeEmailAdapter()
        self.config = make_config(confirm=True, adapter=self.mailer)

    async def test_signup_sends_confirmation_email_without_session(self):
        result = await self._signup(self.config, password=None)

        self.assertEqual(result.to_dict(), {'ok': True})
        self.assertEqual(self.sessions.sessions, [])
        self.assertEqual(len(self.mailer.sent), 1)
        sent = self.mailer.sent[0]
        self.assertEqual(sent.to, 'a@b.com')
        self.assertEqual(sent.send_from, 'noreply@x')
        self.assertEqual(sent.subject, 'Signup request at Acme')

        record = self.store.get('email', 'a@b.com')
        self.assertFalse(record['email_confirmed'])
        self.assertEqual(record['password_hash'], '')

    async def test_confirmation_email_carries_two_hour_token(self):
        await self._signup(self.config, password=None)

        text = self.mailer.sent[0].text
        token = text.split('?token=')[1].split()[0]
        claims = self.tokens.verify(token, 'tempVerifyEmailToken')
        self.assertEqual(claims['email'], 'a@b.com')
        self.assertEqual(claims['issuer'], 'Acme')
        raw = jwt.get_unverified_claims(token)
        self.assertEqual(raw['exp'] - raw['iat'], 2 * 60 * 60)

    async def test_password_policy_is_deferred(self):
        result = await self._signup(self.config, password='x')

        self.assertEqual(result.to_dict(), {'ok': True})

    async def test_unconfirmed_email_can_sign_up_again(self):
        await self._signup(self.config, password=None)

        result = await self._signup(self.config, email='a@B.COM', password=None)

        self.assertEqual(result.to_dict(), {'ok': True})
        self.assertEqual(len(self.store.store), 1)
        self.assertEqual(len(self.mailer.sent), 2)

    async def test_confirmed_email_is_a_conflict(self):
        self.store.create({'email': 'a@b.com', 'email_confirmed': True, 'password_hash': 'x'})

        result = await self._signup(self.config, password=None)

        self.assertEqual(result.to_dict(), {'error': 'Email already exists', 'ok': False})
        self.assertEqual(self.mailer.sent, [])

    async def test_missing_url_is_rejected(self):
        result = await self._signup(self.config, password=None, url=None)

        self.assertEqual(result.error, 'Confirmation URL is required')
        self.assertEqual(self.store.store, {})

    async def test_url_outside_allowed_origins_is_rejected(self):
        config = make_config(confirm=True, adapter=self.mailer, allowed_origins=('https://x',))

        result = await self._signup(config, password=None, url='https://evil.example/signup')

        self.assertEqual(result.to_dict(), {'error': 'Confirmation URL is not allowed', 'ok': False})
        self.assertEqual(self.store.store, {})
        self.assertEqual(self.mailer.sent, [])

    async def test_url_on_allowed_origin_is_accepted(self):
        config = make_config(confirm=True, adapter=self.mailer, allowed_origins=('https://x',))

        result = await self._signup(config, password=None, url='HTTPS://X/signup?lang=de')

        self.assertEqual(result.to_dict(), {'ok': True})
        self.assertEqual(len(self.mailer.sent), 1)


if __name__ == '__main__':
    unittest.main()
