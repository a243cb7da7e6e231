"""Dashboard visibility: hidden for everyone, visible to admin_master or assigned users"""
from types import SimpleNamespace

from app.modules.dashboards.policy import assigned_users_of, can_view_dashboard, filter_visible_reports


def _report(report_id):
    return SimpleNamespace(id=report_id)


class TestCanViewDashboard:

    def test_missing_setting_is_hidden(self):
        assert can_view_dashboard(None, "u-alice", "user") is False
        assert can_view_dashboard(None, "u-master", "admin_master") is False

    def test_hidden_dashboard_excluded_even_for_assigned_user(self):
        setting = {"is_visible": False, "assigned_users": ["u-alice"]}
        assert can_view_dashboard(setting, "u-alice", "user") is False
        assert can_view_dashboard(setting, "u-admin", "admin") is False

    def test_admin_master_sees_every_visible_dashboard(self):
        assert can_view_dashboard({"is_visible": True, "assigned_users": []}, "u-master", "admin_master") is True

    def test_assigned_user_sees_visible_dashboard(self):
        assert can_view_dashboard({"is_visible": True, "assigned_users": ["u-alice"]}, "u-alice", "user") is True

    def test_unassigned_admin_does_not_see_dashboard(self):
        assert can_view_dashboard({"is_visible": True, "assigned_users": ["u-alice"]}, "u-admin", "admin") is False

    def test_malformed_assigned_users(self):
        assert assigned_users_of({"assigned_users": "u-alice"}) == []
        assert assigned_users_of({"assigned_users": ["u-alice", 3, None]}) == ["u-alice"]


class TestFilterVisibleReports:

    def test_hidden_dashboard_excluded_from_every_list(self):
        settings = {
            "r-1": {"is_visible": True, "assigned_users": ["u-alice"]},
            "r-2": {"is_visible": False, "assigned_users": ["u-alice"]},
        }
        reports = [_report("r-1"), _report("r-2"), _report("r-3")]

        for user_id, role in (("u-alice", "user"), ("u-admin", "admin"), ("u-master", "admin_master")):
            visible_ids = [r.id for r in filter_visible_reports(reports, settings, user_id, role)]
            assert "r-2" not in visible_ids
            assert "r-3" not in visible_ids

    def test_order_preserved(self):
        settings = {rid: {"is_visible": True, "assigned_users": []} for rid in ("r-1", "r-2", "r-3")}
        reports = [_report("r-3"), _report("r-1"), _report("r-2")]
        assert [r.id for r in filter_visible_reports(reports, settings, "u-master", "admin_master")] == ["r-3", "r-1", "r-2"]
