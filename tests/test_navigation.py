"""Role-gated menu"""
from app.config.permissions_config import get_navigation_for_role, roles_for_area


def _paths(section):
    return [item["path"] for item in section]


class TestNavigation:

    def test_admin_master_sees_every_admin_entry(self):
        nav = get_navigation_for_role("admin_master")
        assert _paths(nav["main"]) == ["/", "/powerbi", "/tv-published"]
        assert _paths(nav["admin"]) == [
            "/organizations", "/dashboard-management", "/tv-presentations", "/users", "/clients"
        ]

    def test_admin_sees_organizations_only(self):
        nav = get_navigation_for_role("admin")
        assert _paths(nav["main"]) == ["/", "/powerbi", "/tv-published"]
        assert _paths(nav["admin"]) == ["/organizations"]

    def test_user_has_no_admin_section(self):
        nav = get_navigation_for_role("user")
        assert _paths(nav["main"]) == ["/", "/powerbi"]
        assert nav["admin"] == []

    def test_unknown_or_missing_role_sees_nothing(self):
        assert get_navigation_for_role(None) == {"main": [], "admin": []}
        assert get_navigation_for_role("guest") == {"main": [], "admin": []}

    def test_unknown_area_is_closed(self):
        assert roles_for_area("does-not-exist") == []
