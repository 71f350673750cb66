"""API endpoints for usage metering.

Thin HTTP layer over UsageMeteringServiceProtocol: every route resolves the
service from the container and delegates. Domain exceptions are mapped to
status codes by the handlers in api/middleware.py.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from meterline import schemas
from meterline.api import deps
from meterline.api.context import ApiContext
from meterline.api.deps import Inject
from meterline.domains.usage.protocols import UsageMeteringServiceProtocol
from meterline.domains.usage.types import ResourceType, TimeUnit

router = APIRouter()

_NOT_FOUND = {404: {"model": schemas.NotFoundErrorResponse}}
_VALIDATION = {422: {"model": schemas.ValidationErrorResponse}}


@router.put(
    "/companies/{company_id}/limits",
    response_model=List[schemas.ResourceLimit],
    responses={
        **_NOT_FOUND,
        **_VALIDATION,
        400: {"model": schemas.InvalidStateErrorResponse},
    },
)
async def configure_resource_limits(
    company_id: str,
    request: schemas.ConfigureResourceLimitsRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    usage: UsageMeteringServiceProtocol = Inject(UsageMeteringServiceProtocol),
) -> List[schemas.ResourceLimit]:
    """Replace the full set of resource limits of a company.

    Existing counters keep running; new limits apply immediately and new
    units or reset policies apply from the next period.
    """
    ctx.logger.info(f"Configuring {len(request.limits)} resource limits for {company_id}")
    return await usage.configure_resource_limits(
        db, company_id, request.limits, tenant_id=request.tenant_id
    )


@router.get("/companies/{company_id}/limits", response_model=List[schemas.ResourceLimit])
async def get_resource_limits(
    company_id: str,
    db: AsyncSession = Depends(deps.get_db),
    usage: UsageMeteringServiceProtocol = Inject(UsageMeteringServiceProtocol),
) -> List[schemas.ResourceLimit]:
    """List the resource limits of a company (empty if never configured)."""
    return await usage.get_resource_limits(db, company_id)


@router.post(
    "/companies/{company_id}/track",
    response_model=schemas.TrackUsageResponse,
    responses={**_NOT_FOUND, **_VALIDATION},
)
async def track_usage(
    company_id: str,
    request: schemas.TrackUsageRequest,
    db: AsyncSession = Depends(deps.get_db),
    usage: UsageMeteringServiceProtocol = Inject(UsageMeteringServiceProtocol),
) -> schemas.TrackUsageResponse:
    """Report consumption of a resource.

    ``admitted`` is false when the call would push an active resource past
    its limit; the caller should then refuse the operation it metered.
    """
    admitted = await usage.track_usage(
        db,
        company_id,
        request.resource_type,
        amount=request.amount,
        metadata=request.metadata,
        user_id=request.user_id,
    )
    return schemas.TrackUsageResponse(admitted=admitted)


@router.get("/companies/{company_id}/resources", response_model=List[schemas.ResourceUsage])
async def get_resource_usage(
    company_id: str,
    resource_type: Optional[ResourceType] = Query(None),
    db: AsyncSession = Depends(deps.get_db),
    usage: UsageMeteringServiceProtocol = Inject(UsageMeteringServiceProtocol),
) -> List[schemas.ResourceUsage]:
    """Current usage of one resource, or of every tracked resource."""
    return await usage.get_resource_usage(db, company_id, resource_type)


@router.get(
    "/companies/{company_id}/resources/{resource_type}/history",
    response_model=List[schemas.UsageRecord],
)
async def get_usage_history(
    company_id: str,
    resource_type: ResourceType,
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: AsyncSession = Depends(deps.get_db),
    usage: UsageMeteringServiceProtocol = Inject(UsageMeteringServiceProtocol),
) -> List[schemas.UsageRecord]:
    """Audit records of one resource, newest first. Date bounds are inclusive."""
    return await usage.get_usage_history(
        db, company_id, resource_type, start_date=start_date, end_date=end_date, limit=limit
    )


@router.put(
    "/companies/{company_id}/resources/{resource_type}/status",
    response_model=schemas.ResourceUsage,
    responses=_NOT_FOUND,
)
async def set_metering_status(
    company_id: str,
    resource_type: ResourceType,
    request: schemas.SetMeteringStatusRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    usage: UsageMeteringServiceProtocol = Inject(UsageMeteringServiceProtocol),
) -> schemas.ResourceUsage:
    """Set a resource to active, paused or stopped."""
    ctx.logger.info(
        f"Setting metering status of {resource_type.value} for {company_id} "
        f"to {request.status.value}"
    )
    return await usage.set_metering_status(db, company_id, resource_type, request.status)


@router.post(
    "/companies/{company_id}/resources/{resource_type}/reset",
    response_model=schemas.ResourceUsage,
    responses=_NOT_FOUND,
)
async def reset_usage(
    company_id: str,
    resource_type: ResourceType,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    usage: UsageMeteringServiceProtocol = Inject(UsageMeteringServiceProtocol),
) -> schemas.ResourceUsage:
    """Zero the counter of a resource without changing its period."""
    ctx.logger.info(f"Resetting {resource_type.value} usage for {company_id}")
    return await usage.reset_usage(db, company_id, resource_type)


@router.get(
    "/companies/{company_id}/summary",
    response_model=schemas.UsageSummary,
    responses=_NOT_FOUND,
)
async def get_usage_summary(
    company_id: str,
    db: AsyncSession = Depends(deps.get_db),
    usage: UsageMeteringServiceProtocol = Inject(UsageMeteringServiceProtocol),
) -> schemas.UsageSummary:
    """Cross-resource usage summary of a company."""
    summary = await usage.get_usage_summary(db, company_id)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"No usage summary for company {company_id}")
    return summary


@router.get(
    "/companies/{company_id}/report",
    response_model=schemas.UsageReport,
    responses={
        400: {"model": schemas.InvalidStateErrorResponse},
        502: {"model": schemas.ExternalServiceErrorResponse},
    },
)
async def get_usage_report(
    company_id: str,
    period: TimeUnit = Query(...),
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    usage: UsageMeteringServiceProtocol = Inject(UsageMeteringServiceProtocol),
) -> schemas.UsageReport:
    """Generate a usage report through the external report generator."""
    return await usage.get_usage_report(company_id, period, start_date, end_date)
