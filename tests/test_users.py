"""User administration"""
from types import SimpleNamespace

API = "/api/v1/users"


class TestListUsers:

    def test_profiles_merged_with_primary_role(self, client, db, login_as):
        db.seed("profiles", {"id": "u-norole", "first_name": "Zed", "is_active": True})
        login_as("u-master")
        users = {u["id"]: u for u in client.get(API).json()}
        assert users["u-alice"]["role"] == "user"
        assert users["u-master"]["role"] == "admin_master"
        assert users["u-norole"]["role"] is None

    def test_filter_inactive(self, client, db, login_as):
        db.tables["profiles"][3]["is_active"] = False  # u-bob
        login_as("u-master")
        assert [u["id"] for u in client.get(API, params={"is_active": False}).json()] == ["u-bob"]

    def test_admin_master_only(self, client, login_as):
        login_as("u-admin")
        assert client.get(API).status_code == 403


class TestCreateUser:

    def test_creates_auth_user_profile_and_role(self, client, db, login_as):
        db.auth.admin.create_user.return_value = SimpleNamespace(
            user=SimpleNamespace(id="u-new", email="new@contoso.com")
        )
        login_as("u-master")
        response = client.post(API, json={
            "email": "new@contoso.com",
            "password": "secret1",
            "first_name": "Nina",
            "role": "admin",
        })
        assert response.status_code == 201
        assert response.json()["role"] == "admin"
        assert response.json()["email"] == "new@contoso.com"
        assert db.rows("profiles", id="u-new")[0]["first_name"] == "Nina"
        assert [r["role"] for r in db.rows("user_roles", user_id="u-new")] == ["admin"]

    def test_duplicate_email_400(self, client, db, login_as):
        db.auth.admin.create_user.side_effect = Exception("A user with this email address has already been registered")
        login_as("u-master")
        response = client.post(API, json={"email": "alice@contoso.com", "password": "secret1"})
        assert response.status_code == 400

    def test_short_password_422(self, client, login_as):
        login_as("u-master")
        assert client.post(API, json={"email": "x@contoso.com", "password": "123"}).status_code == 422


class TestUpdateUser:

    def test_update_profile(self, client, login_as):
        login_as("u-master")
        response = client.put(f"{API}/u-alice", json={"last_name": "Smith"})
        assert response.json()["last_name"] == "Smith"
        assert response.json()["first_name"] == "Alice"

    def test_unknown_user_404(self, client, login_as):
        login_as("u-master")
        assert client.get(f"{API}/u-404").status_code == 404

    def test_set_role_replaces_every_row(self, client, db, login_as):
        db.seed("user_roles", {"user_id": "u-alice", "role": "admin"})
        login_as("u-master")
        response = client.put(f"{API}/u-alice/role", json={"role": "admin"})
        assert response.json()["role"] == "admin"
        assert [r["role"] for r in db.rows("user_roles", user_id="u-alice")] == ["admin"]

    def test_cannot_change_own_role(self, client, login_as):
        login_as("u-master")
        assert client.put(f"{API}/u-master/role", json={"role": "user"}).status_code == 400

    def test_invalid_role_422(self, client, login_as):
        login_as("u-master")
        assert client.put(f"{API}/u-alice/role", json={"role": "root"}).status_code == 422

    def test_delete_deactivates(self, client, db, login_as):
        login_as("u-master")
        response = client.delete(f"{API}/u-alice")
        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert db.rows("profiles", id="u-alice")[0]["is_active"] is False

        login_as("u-alice")
        assert client.get("/api/v1/auth/me").status_code == 403

    def test_cannot_deactivate_self(self, client, login_as):
        login_as("u-master")
        assert client.delete(f"{API}/u-master").status_code == 400
