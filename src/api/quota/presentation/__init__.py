"""Quota presentation layer: HTTP routes and API models."""
