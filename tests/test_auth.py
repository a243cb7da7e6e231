"""Login, current user + navigation, password change"""
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from app.database.supabase_client import get_session_client_factory
from app.main import app as fastapi_app
from app.modules.auth.service import AuthService

API = "/api/v1/auth"


def _auth_user(user_id="u-alice", email="alice@contoso.com"):
    return SimpleNamespace(id=user_id, email=email, user_metadata={"first_name": "Alice"}, app_metadata={})


class TestLogin:

    def test_login_returns_access_token(self, client, db):
        db.auth.sign_in_with_password.return_value = SimpleNamespace(
            user=_auth_user(),
            session=SimpleNamespace(access_token="jwt-abc"),
        )
        response = client.post(f"{API}/login", json={"email": "alice@contoso.com", "password": "pw"})
        assert response.status_code == 200
        assert response.json() == {
            "access_token": "jwt-abc",
            "token_type": "bearer",
            "user_id": "u-alice",
            "email": "alice@contoso.com",
            "role": "user",
        }

    def test_deactivated_account_refused(self, client, db):
        db.tables["profiles"][2]["is_active"] = False  # u-alice
        db.auth.sign_in_with_password.return_value = SimpleNamespace(
            user=_auth_user(),
            session=SimpleNamespace(access_token="jwt-abc"),
        )
        response = client.post(f"{API}/login", json={"email": "alice@contoso.com", "password": "pw"})
        assert response.status_code == 403

    def test_invalid_credentials_401(self, client, db):
        db.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        response = client.post(f"{API}/login", json={"email": "alice@contoso.com", "password": "bad"})
        assert response.status_code == 401


    def test_sign_in_runs_on_a_separate_client(self, client, db):
        session_client = MagicMock()
        session_client.auth.sign_in_with_password.return_value = SimpleNamespace(
            user=_auth_user(),
            session=SimpleNamespace(access_token="jwt-abc"),
        )
        fastapi_app.dependency_overrides[get_session_client_factory] = lambda: (lambda: session_client)

        response = client.post(f"{API}/login", json={"email": "alice@contoso.com", "password": "pw"})
        assert response.status_code == 200
        session_client.auth.sign_in_with_password.assert_called_once_with(
            {"email": "alice@contoso.com", "password": "pw"}
        )
        db.auth.sign_in_with_password.assert_not_called()


class TestLogout:

    def test_logout_revokes_with_admin_api(self, client, db):
        response = client.post(f"{API}/logout", headers={"Authorization": "Bearer jwt-abc"})
        assert response.status_code == 200
        db.auth.admin.sign_out.assert_called_once_with("jwt-abc")
        db.auth.sign_out.assert_not_called()

    def test_revoke_failure_still_logs_out(self, client, db):
        db.auth.admin.sign_out.side_effect = Exception("session not found")
        response = client.post(f"{API}/logout", headers={"Authorization": "Bearer jwt-abc"})
        assert response.status_code == 200


class TestMe:

    def test_me_returns_role_and_navigation(self, client, login_as):
        login_as("u-admin")
        response = client.get(f"{API}/me")
        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "admin"
        assert [i["path"] for i in body["navigation"]["admin"]] == ["/organizations"]

    def test_first_role_row_wins(self, client, db, login_as):
        db.seed("user_roles", {"user_id": "u-alice", "role": "admin_master"})
        login_as("u-alice")
        assert client.get(f"{API}/me").json()["role"] == "user"


class TestChangePassword:

    def test_change_password_uses_admin_api(self, client, db, login_as):
        db.auth.admin.update_user_by_id.return_value = SimpleNamespace(user=_auth_user())
        login_as("u-alice")
        response = client.post(f"{API}/change-password", json={"new_password": "longer-secret"})
        assert response.status_code == 200
        db.auth.admin.update_user_by_id.assert_called_once_with("u-alice", {"password": "longer-secret"})

    def test_short_password_422(self, client, login_as):
        login_as("u-alice")
        assert client.post(f"{API}/change-password", json={"new_password": "12345"}).status_code == 422


class TestAuthService:

    def test_token_lookup_is_cached(self):
        supabase = MagicMock()
        supabase.auth.get_user.return_value = SimpleNamespace(user=_auth_user())
        service = AuthService(supabase)

        assert service.get_current_user("jwt-1")["id"] == "u-alice"
        assert service.get_current_user("jwt-1")["email"] == "alice@contoso.com"
        assert supabase.auth.get_user.call_count == 1

    def test_logout_drops_cached_token(self):
        supabase = MagicMock()
        supabase.auth.get_user.return_value = SimpleNamespace(user=_auth_user())
        service = AuthService(supabase)

        service.get_current_user("jwt-1")
        service.logout("jwt-1", MagicMock())
        service.get_current_user("jwt-1")
        assert supabase.auth.get_user.call_count == 2

    def test_expired_token_401(self):
        supabase = MagicMock()
        supabase.auth.get_user.side_effect = Exception("JWT expired")
        with pytest.raises(HTTPException) as exc:
            AuthService(supabase).get_current_user("jwt-old")
        assert exc.value.status_code == 401
