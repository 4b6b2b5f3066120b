import unittest
from unittest.mock import patch
from flask_jwt_extended import decode_token
from purchase_gate.app import create_app
from purchase_gate.extensions import gateway, blocklist
from purchase_gate.services.errors import InvalidInput, NotFound, Conflict, Unauthorized, Forbidden

TEST_CONFIG = {
    'TESTING': True,
    'JWT_SECRET_KEY': 'test-secret-key-long-enough-for-hs256',
    'BCRYPT_ROUNDS': 4,
}


class GatewayTestCase(unittest.TestCase):
    config = {}

    def setUp(self):
        self.app = create_app({**TEST_CONFIG, **self.config})
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.gateway = gateway.current

    def tearDown(self):
        self.ctx.pop()


class TestRegisterAndCheckPurchase(GatewayTestCase):

    def test_register_requires_email(self):
        with self.assertRaises(InvalidInput):
            self.gateway.register_purchase('')

    def test_register_defaults(self):
        purchase = self.gateway.register_purchase('New@Buyer.com')
        self.assertEqual(purchase.email, 'new@buyer.com')
        self.assertEqual(purchase.name, 'Test User')
        self.assertTrue(purchase.purchase_id.startswith('TEST_'))
        self.assertTrue(purchase.is_active)

    def test_unknown_email_has_no_purchase(self):
        for email in ['nobody@x.com', 'Someone@Else.org']:
            result = self.gateway.check_purchase(email)
            self.assertFalse(result['hasPurchase'])
            self.assertIn('error', result)

    def test_missing_email_has_no_purchase(self):
        result = self.gateway.check_purchase(None)
        self.assertFalse(result['hasPurchase'])
        self.assertEqual(result['error'], 'Email is required')

    def test_registered_purchase_found_case_insensitive(self):
        self.gateway.register_purchase('A@B.com', name='Ana', purchase_id='TXN1')
        result = self.gateway.check_purchase('a@b.com')
        self.assertTrue(result['hasPurchase'])
        self.assertEqual(result['customerName'], 'Ana')
        self.assertIn('purchaseDate', result)

    def test_inactive_purchase_denied(self):
        self.gateway.register_purchase('a@b.com', name='Ana')
        self.gateway.deactivate_purchase('a@b.com')
        self.assertFalse(self.gateway.check_purchase('a@b.com')['hasPurchase'])


class TestCreatePassword(GatewayTestCase):

    def setUp(self):
        super().setUp()
        self.gateway.register_purchase('A@B.com', name='Ana', purchase_id='TXN1')

    def test_requires_email_and_password(self):
        with self.assertRaises(InvalidInput):
            self.gateway.create_password('a@b.com', '')
        with self.assertRaises(InvalidInput):
            self.gateway.create_password(None, 'secret123')

    def test_requires_purchase(self):
        with self.assertRaises(NotFound):
            self.gateway.create_password('nobody@x.com', 'secret123')

    def test_creates_user_and_token(self):
        result = self.gateway.create_password('a@b.com', 'secret123')
        self.assertEqual(result['user'], {
            'email': 'a@b.com',
            'name': 'Ana',
            'hasCompletedOnboarding': False,
        })
        claims = decode_token(result['token'])
        self.assertEqual(claims['sub'], 'a@b.com')
        self.assertEqual(claims['name'], 'Ana')
        self.assertEqual(claims['exp'] - claims['iat'], 7 * 24 * 3600)

    def test_explicit_name_wins(self):
        result = self.gateway.create_password('a@b.com', 'secret123', name='Ana Maria')
        self.assertEqual(result['user']['name'], 'Ana Maria')

    def test_second_call_conflicts(self):
        self.gateway.create_password('a@b.com', 'secret123')
        with self.assertRaises(Conflict):
            self.gateway.create_password('A@B.COM', 'other-password')

    def test_password_is_hashed(self):
        self.gateway.create_password('a@b.com', 'secret123')
        user = self.gateway.users.find('a@b.com')
        self.assertNotEqual(user.password_hash, 'secret123')

    def test_inactive_purchase_forbidden(self):
        self.gateway.deactivate_purchase('a@b.com')
        with self.assertRaises(Forbidden):
            self.gateway.create_password('a@b.com', 'secret123')
        self.assertIsNone(self.gateway.users.find('a@b.com'))

    def test_rejects_non_string_password(self):
        with self.assertRaises(InvalidInput):
            self.gateway.create_password('a@b.com', 12345678)
        self.assertIsNone(self.gateway.users.find('a@b.com'))

    def test_rejects_password_over_72_bytes(self):
        for password in ['x' * 100, 'é' * 37]:
            with self.assertRaises(InvalidInput) as ctx:
                self.gateway.create_password('a@b.com', password)
            self.assertEqual(ctx.exception.message, 'Password must be at most 72 bytes')

    def test_accepts_72_byte_password(self):
        result = self.gateway.create_password('a@b.com', 'x' * 72)
        self.assertEqual(result['user']['email'], 'a@b.com')
        self.assertEqual(self.gateway.login('a@b.com', 'x' * 72)['user']['email'], 'a@b.com')


class TestLogin(GatewayTestCase):

    def setUp(self):
        super().setUp()
        self.gateway.register_purchase('a@b.com', name='Ana')
        self.gateway.create_password('a@b.com', 'secret123')

    def test_wrong_password(self):
        with self.assertRaises(Unauthorized):
            self.gateway.login('a@b.com', 'wrong')

    def test_unknown_user_same_message(self):
        with self.assertRaises(Unauthorized) as unknown:
            self.gateway.login('nobody@x.com', 'secret123')
        with self.assertRaises(Unauthorized) as wrong:
            self.gateway.login('a@b.com', 'wrong')
        self.assertEqual(unknown.exception.message, wrong.exception.message)

    def test_success_reflects_onboarding(self):
        result = self.gateway.login('A@b.com', 'secret123')
        self.assertFalse(result['user']['hasCompletedOnboarding'])
        self.assertTrue(result['token'])

        self.gateway.complete_onboarding('a@b.com')
        result = self.gateway.login('a@b.com', 'secret123')
        self.assertTrue(result['user']['hasCompletedOnboarding'])

    def test_inactive_purchase_forbidden(self):
        self.gateway.deactivate_purchase('a@b.com')
        with self.assertRaises(Forbidden):
            self.gateway.login('a@b.com', 'secret123')

    def test_unknown_user_still_checks_a_hash(self):
        with patch.object(self.gateway._dummy_user, 'check_password', return_value=False) as check:
            with self.assertRaises(Unauthorized):
                self.gateway.login('nobody@x.com', 'secret123')
        check.assert_called_once_with('secret123')

    def test_invalid_password_input(self):
        for password in [12345678, ['secret123'], 'x' * 73]:
            with self.assertRaises(InvalidInput):
                self.gateway.login('a@b.com', password)


class TestLenientPurchaseCheck(GatewayTestCase):
    config = {'REQUIRE_ACTIVE_PURCHASE': False}

    def test_inactive_purchase_still_allowed(self):
        self.gateway.register_purchase('a@b.com', name='Ana')
        self.gateway.create_password('a@b.com', 'secret123')
        self.gateway.deactivate_purchase('a@b.com')

        self.assertTrue(self.gateway.check_purchase('a@b.com')['hasPurchase'])
        self.assertEqual(self.gateway.login('a@b.com', 'secret123')['user']['email'], 'a@b.com')

    def test_create_password_on_inactive_purchase(self):
        self.gateway.register_purchase('c@d.com', name='Caio')
        self.gateway.deactivate_purchase('c@d.com')
        result = self.gateway.create_password('c@d.com', 'secret123')
        self.assertEqual(result['user']['name'], 'Caio')


class TestCompleteOnboarding(GatewayTestCase):

    def test_idempotent(self):
        self.gateway.register_purchase('a@b.com')
        self.gateway.create_password('a@b.com', 'secret123')
        self.gateway.complete_onboarding('a@b.com')
        self.gateway.complete_onboarding('a@b.com')
        self.assertTrue(self.gateway.profile('a@b.com')['hasCompletedOnboarding'])

    def test_unknown_user(self):
        with self.assertRaises(NotFound):
            self.gateway.complete_onboarding('nobody@x.com')

    def test_requires_email(self):
        with self.assertRaises(InvalidInput):
            self.gateway.complete_onboarding('  ')


class TestIsolation(unittest.TestCase):

    def test_apps_do_not_share_stores(self):
        first = create_app(TEST_CONFIG)
        second = create_app(TEST_CONFIG)
        with first.app_context():
            gateway.current.register_purchase('a@b.com')
        with second.app_context():
            self.assertIsNone(gateway.current.purchases.find('a@b.com'))

    def test_apps_do_not_share_blocklist(self):
        first = create_app(TEST_CONFIG)
        second = create_app(TEST_CONFIG)
        with first.app_context():
            blocklist.add('jti-1')
            self.assertIn('jti-1', blocklist)
        with second.app_context():
            self.assertNotIn('jti-1', blocklist)


if __name__ == '__main__':
    unittest.main()
