"""Mapping of verified token claims to identity fields."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ClaimMapping:
    """Names of the claims a scheme carries tenant and role in.

    The user ID claim is configured on the token verifier itself.
    """

    tenant_claim: str
    role_claim: str

    def tenant_of(self, claims: Mapping[str, Any]) -> str | None:
        """Return the tenant claim, or None when absent or blank."""
        value = claims.get(self.tenant_claim)
        if value is None:
            return None
        tenant_id = str(value).strip()
        return tenant_id or None

    def role_of(self, claims: Mapping[str, Any]) -> Any:
        return claims.get(self.role_claim)


SESSION_TOKEN_CLAIMS = ClaimMapping(tenant_claim="org_id", role_claim="org_role")
FEDERATED_IDENTITY_CLAIMS = ClaimMapping(
    tenant_claim="custom:companyId", role_claim="custom:role"
)
