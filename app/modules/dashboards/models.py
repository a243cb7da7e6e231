# Supabase tables: powerbi_dashboard_settings, powerbi_dashboard_user_settings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

powerbi_dashboard_settings:
- id: uuid (primary key)
- dashboard_id: text (not null, unique) - Power BI report id
- workspace_id: text (nullable) - Power BI workspace (group) id
- is_visible: boolean (default: false)
- assigned_users: jsonb (default: '[]') - list of user ids allowed to open the report
- organization_id: uuid (nullable, foreign key to organizations.id)
- rls_role: text (nullable) - RLS role applied when a user has no personal one
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

powerbi_dashboard_user_settings:
- id: uuid (primary key)
- dashboard_id: text (not null)
- user_id: uuid (not null, foreign key to auth.users.id)
- rls_role: text (not null)
- unique constraint on (dashboard_id, user_id)

A report without a settings row is hidden from everyone.
"""
