"""Identity bounded context.

Resolves the tenant, user and role of a request from its credentials.
"""
