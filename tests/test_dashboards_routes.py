"""Dashboard management screen"""
API = "/api/v1/dashboards"
SETTINGS = "powerbi_dashboard_settings"


class TestDashboardSettings:

    def test_missing_setting_returns_hidden_default(self, client, login_as):
        login_as("u-master")
        response = client.get(f"{API}/r-1/settings")
        assert response.status_code == 200
        setting = response.json()
        assert setting["dashboard_id"] == "r-1"
        assert setting["is_visible"] is False
        assert setting["assigned_users"] == []

    def test_upsert_creates_then_updates(self, client, db, login_as):
        login_as("u-master")
        body = {"workspace_id": "ws-1", "is_visible": True, "assigned_users": ["u-alice", "u-alice"]}
        created = client.put(f"{API}/r-1/settings", json=body).json()
        assert created["assigned_users"] == ["u-alice"]

        body["assigned_users"] = ["u-bob"]
        updated = client.put(f"{API}/r-1/settings", json=body).json()
        assert updated["id"] == created["id"]
        assert updated["assigned_users"] == ["u-bob"]
        assert len(db.rows(SETTINGS, dashboard_id="r-1")) == 1

    def test_bulk_upsert(self, client, db, login_as):
        login_as("u-master")
        response = client.put(f"{API}/settings", json=[
            {"dashboard_id": "r-1", "is_visible": True},
            {"dashboard_id": "r-2", "is_visible": False},
        ])
        assert response.status_code == 200
        assert [s["dashboard_id"] for s in client.get(f"{API}/settings").json()] == ["r-1", "r-2"]

    def test_admin_master_only(self, client, login_as):
        login_as("u-admin")
        assert client.get(f"{API}/settings").status_code == 403
        assert client.put(f"{API}/r-1/settings", json={"is_visible": True}).status_code == 403


class TestCatalog:

    def test_every_report_merged_with_settings(self, client, db, login_as):
        db.seed(SETTINGS, {"dashboard_id": "r-2", "workspace_id": "ws-1", "is_visible": True, "assigned_users": ["u-bob"]})
        login_as("u-master")
        catalog = client.get(f"{API}/catalog").json()

        assert [item["id"] for item in catalog] == ["r-1", "r-2", "r-3"]
        by_id = {item["id"]: item for item in catalog}
        assert by_id["r-1"]["settings"]["is_visible"] is False
        assert by_id["r-1"]["settings"]["workspace_id"] == "ws-1"
        assert by_id["r-2"]["settings"]["assigned_users"] == ["u-bob"]
        assert by_id["r-3"]["workspace_name"] == "Finance"


class TestAssignableUsers:

    def test_everyone_active_without_organization(self, client, db, login_as):
        db.tables["profiles"][3]["is_active"] = False  # u-bob
        login_as("u-master")
        ids = [u["id"] for u in client.get(f"{API}/r-1/assignable-users").json()]
        assert sorted(ids) == ["u-admin", "u-alice", "u-master"]

    def test_dashboard_organization_members(self, client, db, login_as):
        db.seed("organizations", {"id": "org-1", "name": "Contoso", "owner_id": "u-admin"})
        db.seed("organization_members", {"organization_id": "org-1", "user_id": "u-alice", "role": "member"})
        db.seed(SETTINGS, {"dashboard_id": "r-1", "is_visible": True, "assigned_users": [], "organization_id": "org-1"})
        login_as("u-master")
        users = client.get(f"{API}/r-1/assignable-users").json()
        assert [u["id"] for u in users] == ["u-alice"]
        assert users[0]["role"] == "user"

    def test_client_organization_members(self, client, db, login_as):
        db.seed("organizations", {"id": "org-2", "name": "Fabrikam", "owner_id": "u-admin"})
        db.seed("organization_members", {"organization_id": "org-2", "user_id": "u-bob", "role": "member"})
        db.tables["powerbi_clients"][0]["organization_id"] = "org-2"
        login_as("u-master")
        users = client.get(f"{API}/r-1/assignable-users", params={"client_id": "pc-1"}).json()
        assert [u["id"] for u in users] == ["u-bob"]


class TestUserRlsSettings:

    def test_none_when_missing(self, client, login_as):
        login_as("u-master")
        response = client.get(f"{API}/r-1/user-settings/u-alice")
        assert response.status_code == 200
        assert response.json() is None

    def test_upsert_and_delete(self, client, db, login_as):
        login_as("u-master")
        client.put(f"{API}/r-1/user-settings/u-alice", json={"rls_role": "Region"})
        client.put(f"{API}/r-1/user-settings/u-alice", json={"rls_role": "Manager"})
        rows = db.rows("powerbi_dashboard_user_settings", dashboard_id="r-1", user_id="u-alice")
        assert [r["rls_role"] for r in rows] == ["Manager"]

        assert client.get(f"{API}/r-1/user-settings/u-alice").json()["rls_role"] == "Manager"
        assert client.delete(f"{API}/r-1/user-settings/u-alice").status_code == 204
        assert db.rows("powerbi_dashboard_user_settings") == []

    def test_blank_role_rejected(self, client, login_as):
        login_as("u-master")
        assert client.put(f"{API}/r-1/user-settings/u-alice", json={"rls_role": ""}).status_code == 422
