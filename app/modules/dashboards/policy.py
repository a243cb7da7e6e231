"""Dashboard-level visibility rules."""
from typing import Any, Dict, Iterable, List, Optional

from app.config.permissions_config import ADMIN_MASTER


def assigned_users_of(setting: Optional[Dict[str, Any]]) -> List[str]:
    """assigned_users is jsonb; anything that is not a list counts as nobody"""
    if not setting:
        return []
    users = setting.get("assigned_users")
    return [u for u in users if isinstance(u, str)] if isinstance(users, list) else []


def can_view_dashboard(setting: Optional[Dict[str, Any]], user_id: str, role: Optional[str]) -> bool:
    """Visible dashboards only; admin_master sees all of them, others must be assigned."""
    if not setting or not setting.get("is_visible"):
        return False
    if role == ADMIN_MASTER:
        return True
    return user_id in assigned_users_of(setting)


def filter_visible_reports(
    reports: Iterable[Any],
    settings_by_dashboard: Dict[str, Dict[str, Any]],
    user_id: str,
    role: Optional[str],
) -> List[Any]:
    """Keep the reports (objects with an `id`) the user may see, in their original order."""
    return [
        report for report in reports
        if can_view_dashboard(settings_by_dashboard.get(report.id), user_id, role)
    ]
