#!/usr/bin/env python3
"""
Test script for client session management.
Covers the licence token, the signed-in account and logout.
"""

import asyncio
import os
import sys
import unittest
from datetime import datetime, timedelta, timezone

# No artificial waits in tests
os.environ['ACTIVATION_DELAY'] = '0'
os.environ['GUARD_DELAY'] = '0'

# Add storefront directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'storefront'))

from aiohttp import test_utils, web

from activation import ActivationClient
from local_storage import (
    LocalStorage,
    AUTH_USER_KEY,
    USER_LICENSE_KEY,
    LICENSE_TOKEN_KEY,
    ACTIVATED_LICENSE_KEY,
    SELECTED_ADD_ONS_KEY,
)
from server import create_app
from session import SessionManager
from token_codec import encode_token, format_timestamp

UNREACHABLE_URL = "http://127.0.0.1:1"


class TestLicenceToken(unittest.TestCase):
    """Token flow: activation stores a token that gates the dashboard."""

    def setUp(self):
        self.storage = LocalStorage()
        self.session = SessionManager(
            self.storage,
            activation_client=ActivationClient(base_url=UNREACHABLE_URL, delay=0),
        )

    def test_activation_stores_token(self):
        result = asyncio.run(self.session.activate("frank@example.com", "FRANK-KEY-001"))

        self.assertTrue(result["success"])
        self.assertEqual(self.session.get_token(), result["token"])
        self.assertTrue(self.session.has_valid_license())
        self.assertEqual(self.session.get_license_info()["email"], "frank@example.com")
        print("✓ Activation stores the token")

    def test_refused_activation_stores_nothing(self):
        for key in ("INVALID", "EXPIRED", "LIMIT"):
            result = asyncio.run(self.session.activate("frank@example.com", key))
            self.assertFalse(result["success"])
            self.assertIsNone(self.session.get_token())
        self.assertFalse(self.session.has_valid_license())
        print("✓ Refused activation stores nothing")

    def test_expired_token_is_not_a_license(self):
        past = format_timestamp(datetime.now(timezone.utc) - timedelta(days=1))
        self.session.set_token(encode_token({"email": "old@example.com", "expiration": past}))

        self.assertFalse(self.session.has_valid_license())
        self.assertIsNone(self.session.get_license_info())
        print("✓ Expired token does not count")

    def test_malformed_token_is_not_a_license(self):
        self.session.set_token("not-a-token")
        self.assertFalse(self.session.has_valid_license())
        self.assertIsNone(self.session.get_license_info())

        self.session.remove_token()
        self.assertIsNone(self.session.get_token())
        print("✓ Malformed token does not count")


class TestAccount(unittest.TestCase):
    """Simple-auth flow: account, attached licence and logout."""

    def setUp(self):
        self.storage = LocalStorage()

    def _session(self, storefront_url=UNREACHABLE_URL, licence_api_url=UNREACHABLE_URL):
        return SessionManager(
            self.storage,
            storefront_url=storefront_url,
            licence_api_url=licence_api_url,
            activation_client=ActivationClient(base_url=UNREACHABLE_URL, delay=0),
        )

    def test_logout_clears_user_and_license(self):
        session = self._session()
        session.set_user({"id": 7, "email": "gina@example.com"})
        self.storage.set_json(USER_LICENSE_KEY, {"licenseKey": "K"})
        session.set_token("a.b.c")
        self.storage.set_json(ACTIVATED_LICENSE_KEY, {"ok": True})
        self.storage.set_json(SELECTED_ADD_ONS_KEY, ["cloud-backup"])

        session.logout()

        for key in (AUTH_USER_KEY, USER_LICENSE_KEY, LICENSE_TOKEN_KEY, ACTIVATED_LICENSE_KEY):
            self.assertNotIn(key, self.storage)
        self.assertIn(SELECTED_ADD_ONS_KEY, self.storage)
        self.assertFalse(session.is_logged_in())
        print("✓ Logout clears user and licence keys")

    def test_license_requires_user(self):
        result = asyncio.run(self._session().activate_account_license("KEY-123"))
        self.assertEqual(result, {"success": False, "error": "User not authenticated"})
        print("✓ Licence activation needs a user")

    def test_unreachable_licence_host_stores_mock_license(self):
        session = self._session()
        session.set_user({"id": 2, "email": "hank@example.com"})

        result = asyncio.run(session.activate_account_license("HANK-KEY"))

        self.assertTrue(result["success"])
        stored = session.get_license()
        self.assertEqual(stored, result["license"])
        self.assertEqual(stored["email"], "hank@example.com")
        self.assertEqual(stored["licenseKey"], "HANK-KEY")
        self.assertIn("expiresAt", stored)
        print("✓ Unreachable host still stores a licence")

    def test_licence_host_answers(self):
        async def activate(request):
            body = await request.json()
            if body["licenseKey"] == "BAD":
                return web.json_response({"error": "Unknown key"}, status=400)
            return web.json_response({"license": {"email": body["email"], "licenseKey": body["licenseKey"]}})

        async def scenario():
            app = web.Application()
            app.router.add_post('/api/v0/licence/activate', activate)
            server = test_utils.TestServer(app)
            await server.start_server()
            try:
                session = self._session(licence_api_url=str(server.make_url('')))
                session.set_user({"id": 3, "email": "ivy@example.com"})
                good = await session.activate_account_license("GOOD")
                stored = session.get_license()
                bad = await session.activate_account_license("BAD")
                return good, stored, bad
            finally:
                await server.close()

        good, stored, bad = asyncio.run(scenario())
        self.assertEqual(good["license"], {"email": "ivy@example.com", "licenseKey": "GOOD"})
        self.assertEqual(stored, good["license"])
        self.assertEqual(bad, {"success": False, "error": "Unknown key"})
        print("✓ Licence host responses are honoured")

    def test_register_and_login_against_server(self):
        async def scenario():
            server = test_utils.TestServer(create_app())
            await server.start_server()
            try:
                session = self._session(storefront_url=str(server.make_url('')))
                registered = await session.register("jack@example.com", "secret99")
                duplicate = await session.register("jack@example.com", "secret99")
                logged_in = await session.login("jack@example.com", "secret99")
                refused = await session.login("jack@example.com", "wrong-pass")
                return registered, duplicate, logged_in, refused
            finally:
                await server.close()

        registered, duplicate, logged_in, refused = asyncio.run(scenario())
        self.assertEqual(registered, {"success": True, "user": {"id": 2, "email": "jack@example.com"}})
        self.assertEqual(duplicate, {"success": False, "error": "User with this email already exists"})
        self.assertEqual(logged_in["user"]["id"], 2)
        self.assertEqual(refused, {"success": False, "error": "Invalid email or password"})
        print("✓ Register and login talk to the storefront server")

    def test_auth_network_error(self):
        result = asyncio.run(self._session().login("kim@example.com", "secret99"))
        self.assertEqual(result, {"success": False, "error": "Network error. Please try again."})
        print("✓ Network errors are reported")


if __name__ == '__main__':
    unittest.main(verbosity=2)
