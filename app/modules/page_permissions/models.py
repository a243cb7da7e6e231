# Supabase table: powerbi_dashboard_page_permissions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

powerbi_dashboard_page_permissions:
- id: uuid (primary key)
- dashboard_id: text (not null) - Power BI report id
- page_name: text (not null) - internal page (tab) name, e.g. "ReportSection3b1c"
- page_display_name: text (nullable) - tab title shown to users
- user_id: uuid (not null, foreign key to auth.users.id)
- created_at: timestamp (default: now())
- unique constraint on (dashboard_id, page_name, user_id)

Rows are grants. A user with no row on a dashboard sees every page; a user
with rows sees only the listed pages.
"""
