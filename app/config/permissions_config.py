"""
Roles and Navigation Configuration
This config defines the portal roles and which areas / menu entries each role can reach.
Used by the auth module (navigation for the current user) and by route guards.
"""

ADMIN_MASTER = "admin_master"
ADMIN = "admin"
USER = "user"

# Ordered from most to least privileged
APP_ROLES = [ADMIN_MASTER, ADMIN, USER]

ROLE_DESCRIPTIONS = {
    ADMIN_MASTER: "Full administrative access: dashboards, users, Power BI clients",
    ADMIN: "Organization administration and published TV dashboards",
    USER: "Access to assigned reports",
}

ORGANIZATION_ROLES = ["admin", "member"]

# Roles allowed per portal area
AREAS = {
    "home": [ADMIN_MASTER, ADMIN, USER],
    "reports": [ADMIN_MASTER, ADMIN, USER],
    "tv_published": [ADMIN_MASTER, ADMIN],
    "organizations": [ADMIN_MASTER, ADMIN],
    "dashboard_management": [ADMIN_MASTER],
    "tv_management": [ADMIN_MASTER],
    "users": [ADMIN_MASTER],
    "powerbi_clients": [ADMIN_MASTER],
}

# Menu entries, in display order
MENU_ITEMS = [
    {"title": "Home", "path": "/", "section": "main", "area": "home"},
    {"title": "Power BI", "path": "/powerbi", "section": "main", "area": "reports"},
    {"title": "TV Dashboards", "path": "/tv-published", "section": "main", "area": "tv_published"},
    {"title": "Organizations", "path": "/organizations", "section": "admin", "area": "organizations"},
    {"title": "Manage Dashboards", "path": "/dashboard-management", "section": "admin", "area": "dashboard_management"},
    {"title": "TV Management", "path": "/tv-presentations", "section": "admin", "area": "tv_management"},
    {"title": "Users", "path": "/users", "section": "admin", "area": "users"},
    {"title": "Power BI Clients", "path": "/clients", "section": "admin", "area": "powerbi_clients"},
]


def roles_for_area(area: str) -> list:
    """Roles that can reach a portal area. Unknown areas are closed to everyone."""
    return list(AREAS.get(area, []))


def get_navigation_for_role(role):
    """
    Returns the menu entries visible to a role, split by section
    Format: {
        "main": [{"title": "...", "path": "/..."}, ...],
        "admin": [...]
    }
    A missing or unknown role gets empty sections.
    """
    navigation = {"main": [], "admin": []}
    if role not in APP_ROLES:
        return navigation

    for item in MENU_ITEMS:
        if role in AREAS[item["area"]]:
            navigation[item["section"]].append({
                "title": item["title"],
                "path": item["path"]
            })

    return navigation
