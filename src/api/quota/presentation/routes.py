"""HTTP routes for tenant quota usage and administration.

Every route acts on the caller's own tenant; there is no cross-tenant
access through this surface.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from identity.dependencies import get_auth_context, require_admin
from identity.domain import AuthContext
from quota.application import TenantQuotaService
from quota.dependencies import get_tenant_quota_service
from quota.ports import (
    StoreUnavailableError,
    TenantAlreadyExistsError,
    TenantNotFoundError,
)
from quota.presentation.models import (
    ChangeTierRequest,
    FeatureAccessResponse,
    UsageSummaryResponse,
)

router = APIRouter(
    prefix="/quota",
    tags=["quota"],
)


@router.get("/usage")
async def get_usage(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[TenantQuotaService, Depends(get_tenant_quota_service)],
) -> UsageSummaryResponse:
    """Get the caller's tenant usage against its tier limits.

    Raises:
        HTTPException: 404 if the tenant has no quota record
        HTTPException: 503 if the quota store is unavailable
    """
    try:
        summary = await service.get_usage(auth.tenant_id)
    except TenantNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tenant {auth.tenant_id} not found",
        ) from e
    except StoreUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quota store unavailable",
        ) from e
    return UsageSummaryResponse.from_domain(summary)


@router.get("/features/{feature}")
async def get_feature_access(
    feature: str,
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    service: Annotated[TenantQuotaService, Depends(get_tenant_quota_service)],
) -> FeatureAccessResponse:
    """Check whether the caller's tier includes a feature.

    Raises:
        HTTPException: 404 if the tenant has no quota record
        HTTPException: 503 if the quota store is unavailable
    """
    try:
        enabled = await service.has_feature(auth.tenant_id, feature)
    except TenantNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tenant {auth.tenant_id} not found",
        ) from e
    except StoreUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quota store unavailable",
        ) from e
    return FeatureAccessResponse(feature=feature, enabled=enabled)


@router.post("/tenant", status_code=status.HTTP_201_CREATED)
async def onboard_tenant(
    auth: Annotated[AuthContext, Depends(require_admin)],
    service: Annotated[TenantQuotaService, Depends(get_tenant_quota_service)],
) -> UsageSummaryResponse:
    """Create the quota record of the caller's tenant on the trial tier.

    Raises:
        HTTPException: 409 if the tenant already has a record
        HTTPException: 503 if the quota store is unavailable
    """
    try:
        await service.onboard_tenant(auth.tenant_id)
        summary = await service.get_usage(auth.tenant_id)
    except TenantAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Tenant {auth.tenant_id} is already onboarded",
        ) from e
    except StoreUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quota store unavailable",
        ) from e
    return UsageSummaryResponse.from_domain(summary)


@router.put("/tier", status_code=status.HTTP_204_NO_CONTENT)
async def change_tier(
    request: ChangeTierRequest,
    auth: Annotated[AuthContext, Depends(require_admin)],
    service: Annotated[TenantQuotaService, Depends(get_tenant_quota_service)],
) -> None:
    """Change the caller's tenant subscription tier. Admin only.

    Raises:
        HTTPException: 403 if the caller is not an admin
        HTTPException: 404 if the tenant has no quota record
        HTTPException: 503 if the quota store is unavailable
    """
    try:
        await service.change_tier(auth.tenant_id, request.tier, request.status)
    except TenantNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tenant {auth.tenant_id} not found",
        ) from e
    except StoreUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quota store unavailable",
        ) from e
