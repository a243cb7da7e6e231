# Supabase Auth
# Portal users authenticate with Supabase's built-in authentication system.
# Accounts are created by an admin_master (see users module); there is no
# self-service registration.

"""
Supabase Auth calls used by this module:
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the current user from a JWT
- auth.sign_out() - Logout
- auth.admin.update_user_by_id() - Change password (service role client)

The portal role of a user lives in public.user_roles, not in auth metadata.
"""
