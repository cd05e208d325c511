"""Pieces both bounded contexts depend on.

Bearer token verification, the security event sink and the observation
context live here. Identity and quota never import each other, so anything
they both need belongs in this package and nothing else.
"""
