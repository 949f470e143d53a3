"""Tests for CMS login, registration and token helpers."""

import base64
import json
import unittest
from unittest.mock import MagicMock, patch

from common.cms.auth import (
    decode_token_claims,
    fetch_current_user,
    login,
    register,
    token_expired,
)
from common.cms.errors import AuthError, CMSError


def make_token(claims):
    payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).decode().rstrip("=")
    return f"header.{payload}.signature"


class TestFetchCurrentUser(unittest.TestCase):

    @patch('common.cms.auth.get_cms_client')
    def test_returns_user_with_role(self, mock_get_client):
        mock_get_client.return_value.get.return_value = {
            "id": 1, "username": "ed", "role": {"name": "Editor", "type": "editor"}
        }

        user = fetch_current_user("jwt")

        self.assertEqual(user.username, "ed")
        self.assertEqual(user.role["type"], "editor")
        mock_get_client.return_value.get.assert_called_once_with("api/users/me?populate=role", token="jwt")

    @patch('common.cms.auth.get_cms_client')
    def test_rejected_token(self, mock_get_client):
        mock_get_client.return_value.get.side_effect = CMSError("Unauthorized", 401)
        self.assertIsNone(fetch_current_user("bad"))

    @patch('common.cms.auth.get_cms_client')
    def test_unreachable_cms_raises(self, mock_get_client):
        mock_get_client.return_value.get.side_effect = CMSError("down")
        with self.assertRaises(CMSError):
            fetch_current_user("jwt")


class TestLogin(unittest.TestCase):

    @patch('common.cms.auth.fetch_current_user')
    @patch('common.cms.auth.get_cms_client')
    def test_login_enriches_user(self, mock_get_client, mock_fetch):
        mock_get_client.return_value.post.return_value = {"jwt": "tok", "user": {"id": 1, "username": "ed"}}
        enriched = MagicMock(id=1)
        mock_fetch.return_value = enriched

        response = login("ed", "secret")

        self.assertEqual(response.jwt, "tok")
        self.assertIs(response.user, enriched)
        mock_get_client.return_value.post.assert_called_once_with(
            "api/auth/local", json={"identifier": "ed", "password": "secret"})
        mock_fetch.assert_called_once_with("tok")

    @patch('common.cms.auth.fetch_current_user', side_effect=CMSError("down"))
    @patch('common.cms.auth.get_cms_client')
    def test_login_keeps_basic_user_when_role_lookup_fails(self, mock_get_client, mock_fetch):
        mock_get_client.return_value.post.return_value = {"jwt": "tok", "user": {"id": 1, "username": "ed"}}

        response = login("ed", "secret")

        self.assertEqual(response.user.username, "ed")
        self.assertEqual(response.user.role, {"type": "authenticated", "name": "Authenticated"})

    @patch('common.cms.auth.get_cms_client')
    def test_login_rejected(self, mock_get_client):
        mock_get_client.return_value.post.side_effect = CMSError("Invalid identifier or password", 400)

        with self.assertRaises(AuthError) as ctx:
            login("ed", "wrong")

        self.assertEqual(ctx.exception.message, "Invalid identifier or password")
        self.assertEqual(ctx.exception.status, 400)

    @patch('common.cms.auth.get_cms_client')
    def test_login_without_jwt(self, mock_get_client):
        mock_get_client.return_value.post.return_value = {"user": {"id": 1}}
        with self.assertRaises(AuthError):
            login("ed", "secret")

    @patch('common.cms.auth.fetch_current_user', return_value=None)
    @patch('common.cms.auth.get_cms_client')
    def test_register(self, mock_get_client, mock_fetch):
        mock_get_client.return_value.post.return_value = {"jwt": "tok", "user": {"id": 2, "username": "new"}}

        response = register("new", "new@example.com", "secret")

        self.assertEqual(response.user.id, 2)
        mock_get_client.return_value.post.assert_called_once_with(
            "api/auth/local/register",
            json={"username": "new", "email": "new@example.com", "password": "secret"})

    @patch('common.cms.auth.get_cms_client')
    def test_register_rejected(self, mock_get_client):
        mock_get_client.return_value.post.side_effect = CMSError("Email or Username are already taken", 400)

        with self.assertRaises(AuthError) as ctx:
            register("new", "new@example.com", "secret")

        self.assertEqual(ctx.exception.message, "Email or Username are already taken")


class TestTokenClaims(unittest.TestCase):

    def test_decode(self):
        claims = decode_token_claims(make_token({"id": 3, "iat": 100, "exp": 200}))
        self.assertEqual(claims, {"id": 3, "iat": 100, "exp": 200})

    def test_decode_malformed(self):
        self.assertIsNone(decode_token_claims("not-a-jwt"))
        self.assertIsNone(decode_token_claims("a.!!!.c"))
        self.assertIsNone(decode_token_claims(make_token([1, 2])))

    def test_expired(self):
        self.assertTrue(token_expired({"exp": 100}, now=200))
        self.assertFalse(token_expired({"exp": 300}, now=200))
        self.assertFalse(token_expired({}, now=200))


if __name__ == '__main__':
    unittest.main()
