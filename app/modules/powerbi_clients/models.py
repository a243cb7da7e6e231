# Supabase table: powerbi_clients
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

powerbi_clients:
- id: uuid (primary key)
- name: text (not null) - display name of the tenant / customer
- client_id: text (not null) - Azure AD application (service principal) id
- tenant_id: text (not null) - Azure AD tenant id
- client_secret: text (not null) - secret VALUE of the app registration
- email: text (not null) - Power BI account used to administer the workspaces
- password: text (not null)
- organization_id: uuid (nullable, foreign key to organizations.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

The oldest row (by created_at) is the default client when a request does not
name one. Rows are read with the service role key only.
"""
