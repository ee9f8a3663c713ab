"""
Auth package for the SEO Redirect admin API.

Provides HTTP Basic authentication for admin endpoints. The authenticated
username doubles as the ownership scope when the storage backend is
multi-tenant.
"""
