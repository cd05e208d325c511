"""Quota bounded context.

Tracks per-tenant resource counters against subscription tier limits and
enforces them with atomic conditional writes.
"""
