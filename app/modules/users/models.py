# Supabase tables: profiles, user_roles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- first_name: text (nullable)
- last_name: text (nullable)
- is_active: boolean (nullable, default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- role: app_role enum ('admin_master', 'admin', 'user')
- created_at: timestamp (default: now())

Note: a user may have several user_roles rows; the oldest one is the
primary role used for access checks.
"""
