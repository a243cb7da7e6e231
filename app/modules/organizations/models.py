# Supabase tables: organizations, organization_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

organizations:
- id: uuid (primary key)
- name: text (not null)
- owner_id: uuid (foreign key to auth.users.id, not null)
- logo_url: text (nullable)
- primary_color: text (nullable) - hex color used to brand the portal
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

organization_members:
- id: uuid (primary key)
- organization_id: uuid (foreign key to organizations.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- role: text (not null, default: 'member') - values: admin, member
- created_at: timestamp (default: now())
- unique constraint on (organization_id, user_id)
"""
