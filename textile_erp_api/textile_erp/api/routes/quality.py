from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import MANAGERS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok, ok_list
from textile_erp.schemas.enums import (
    CheckpointStatus,
    CheckpointType,
    ComplianceStatus,
    ComplianceType,
    DefectCategory,
    DefectResolutionStatus,
    DefectSeverity,
    InspectionReferenceType,
    InspectionStatus,
    InspectionType,
)
from textile_erp.schemas.quality import (
    ComplianceCreate,
    ComplianceRead,
    ComplianceUpdate,
    DefectBreakdown,
    DefectCreate,
    DefectRead,
    DefectResolve,
    InspectionCheckpointIn,
    InspectionComplete,
    InspectionCreate,
    InspectionMetrics,
    InspectionRead,
    InspectionUpdate,
    QualityCheckpointCreate,
    QualityCheckpointRead,
    QualityCheckpointUpdate,
    QualityMetricCreate,
    QualityMetricRead,
)
from textile_erp.services.quality import QualityService

router = APIRouter(prefix="/quality", tags=["Quality"])


def _value(member) -> Optional[str]:
    return member.value if member is not None else None


# Inspections

# PUBLIC_INTERFACE
@router.get(
    "/inspections/metrics",
    response_model=ApiResponse[InspectionMetrics],
    summary="Inspection metrics",
    description="Counts by outcome, pass rate and average inspection duration for inspections created in range.",
)
async def inspection_metrics(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(await QualityService(session, ctx).inspection_metrics(start, end))


# PUBLIC_INTERFACE
@router.get("/inspections", response_model=ApiResponse[List[InspectionRead]], summary="List inspections")
async def list_inspections(
    inspection_type: Optional[InspectionType] = Query(None),
    status_filter: Optional[InspectionStatus] = Query(None, alias="status"),
    reference_type: Optional[InspectionReferenceType] = Query(None),
    reference_id: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None, description="Match inspection number or inspector"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await QualityService(session, ctx).list_inspections(
        inspection_type=_value(inspection_type),
        status=_value(status_filter),
        reference_type=_value(reference_type),
        reference_id=reference_id,
        start=start,
        end=end,
        search=search,
        limit=limit,
        offset=offset,
    )
    return ok_list(InspectionRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/inspections",
    response_model=ApiResponse[InspectionRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create inspection",
    description="Creates a PENDING inspection INS### with optional checkpoints.",
)
async def create_inspection(
    payload: InspectionCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    inspection = await QualityService(session, ctx).create_inspection(payload)
    return ok(InspectionRead.model_validate(inspection), "Inspection created")


# PUBLIC_INTERFACE
@router.get("/inspections/{inspection_id}", response_model=ApiResponse[InspectionRead], summary="Get inspection")
async def get_inspection(
    inspection_id: UUID = Path(..., description="Inspection ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(InspectionRead.model_validate(await QualityService(session, ctx).get_inspection(inspection_id)))


# PUBLIC_INTERFACE
@router.put("/inspections/{inspection_id}", response_model=ApiResponse[InspectionRead], summary="Update inspection")
async def update_inspection(
    payload: InspectionUpdate,
    inspection_id: UUID = Path(..., description="Inspection ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    inspection = await QualityService(session, ctx).update_inspection(inspection_id, payload)
    return ok(InspectionRead.model_validate(inspection), "Inspection updated")


# PUBLIC_INTERFACE
@router.post(
    "/inspections/{inspection_id}/start",
    response_model=ApiResponse[InspectionRead],
    summary="Start inspection",
    description="PENDING to IN_PROGRESS; sets started_at.",
)
async def start_inspection(
    inspection_id: UUID = Path(..., description="Inspection ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    inspection = await QualityService(session, ctx).start_inspection(inspection_id)
    return ok(InspectionRead.model_validate(inspection), "Inspection started")


# PUBLIC_INTERFACE
@router.post(
    "/inspections/{inspection_id}/complete",
    response_model=ApiResponse[InspectionRead],
    summary="Complete inspection",
    description="PASS, FAIL or CONDITIONAL moves the inspection to PASSED, FAILED or CONDITIONAL.",
)
async def complete_inspection(
    payload: InspectionComplete,
    inspection_id: UUID = Path(..., description="Inspection ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    inspection = await QualityService(session, ctx).complete_inspection(inspection_id, payload)
    return ok(InspectionRead.model_validate(inspection), "Inspection completed")


# PUBLIC_INTERFACE
@router.put(
    "/inspections/{inspection_id}/checkpoints",
    response_model=ApiResponse[InspectionRead],
    summary="Save inspection checkpoints",
    description="Items with an id update that checkpoint; items without one are added.",
)
async def save_inspection_checkpoints(
    items: List[InspectionCheckpointIn],
    inspection_id: UUID = Path(..., description="Inspection ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    inspection = await QualityService(session, ctx).save_checkpoints(inspection_id, items)
    return ok(InspectionRead.model_validate(inspection), "Checkpoints saved")


# PUBLIC_INTERFACE
@router.delete("/inspections/{inspection_id}", response_model=ApiResponse[None], summary="Delete inspection")
async def delete_inspection(
    inspection_id: UUID = Path(..., description="Inspection ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await QualityService(session, ctx).delete_inspection(inspection_id)
    return ok(None, "Inspection deleted")


# Quality checkpoints

# PUBLIC_INTERFACE
@router.get("/checkpoints", response_model=ApiResponse[List[QualityCheckpointRead]], summary="List quality checkpoints")
async def list_checkpoints(
    checkpoint_type: Optional[CheckpointType] = Query(None),
    status_filter: Optional[CheckpointStatus] = Query(None, alias="status"),
    start: Optional[datetime] = Query(None, description="Inspection date from"),
    end: Optional[datetime] = Query(None, description="Inspection date to"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await QualityService(session, ctx).list_checkpoints(
        checkpoint_type=_value(checkpoint_type),
        status=_value(status_filter),
        start=start,
        end=end,
        limit=limit,
        offset=offset,
    )
    return ok_list(QualityCheckpointRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/checkpoints",
    response_model=ApiResponse[QualityCheckpointRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create quality checkpoint",
)
async def create_checkpoint(
    payload: QualityCheckpointCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    checkpoint = await QualityService(session, ctx).create_checkpoint(payload)
    return ok(QualityCheckpointRead.model_validate(checkpoint), "Quality checkpoint created")


# PUBLIC_INTERFACE
@router.get(
    "/checkpoints/{checkpoint_id}",
    response_model=ApiResponse[QualityCheckpointRead],
    summary="Get quality checkpoint",
)
async def get_checkpoint(
    checkpoint_id: UUID = Path(..., description="Checkpoint ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(QualityCheckpointRead.model_validate(await QualityService(session, ctx).get_checkpoint(checkpoint_id)))


# PUBLIC_INTERFACE
@router.put(
    "/checkpoints/{checkpoint_id}",
    response_model=ApiResponse[QualityCheckpointRead],
    summary="Update quality checkpoint",
)
async def update_checkpoint(
    payload: QualityCheckpointUpdate,
    checkpoint_id: UUID = Path(..., description="Checkpoint ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    checkpoint = await QualityService(session, ctx).update_checkpoint(checkpoint_id, payload)
    return ok(QualityCheckpointRead.model_validate(checkpoint), "Quality checkpoint updated")


# PUBLIC_INTERFACE
@router.delete("/checkpoints/{checkpoint_id}", response_model=ApiResponse[None], summary="Delete quality checkpoint")
async def delete_checkpoint(
    checkpoint_id: UUID = Path(..., description="Checkpoint ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await QualityService(session, ctx).delete_checkpoint(checkpoint_id)
    return ok(None, "Quality checkpoint deleted")


# PUBLIC_INTERFACE
@router.get(
    "/checkpoints/{checkpoint_id}/metrics",
    response_model=ApiResponse[List[QualityMetricRead]],
    summary="List checkpoint metrics",
)
async def list_metrics(
    checkpoint_id: UUID = Path(..., description="Checkpoint ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok_list(QualityMetricRead, await QualityService(session, ctx).list_metrics(checkpoint_id))


# PUBLIC_INTERFACE
@router.post(
    "/metrics",
    response_model=ApiResponse[QualityMetricRead],
    status_code=status.HTTP_201_CREATED,
    summary="Record quality metric",
    description="is_within_range holds when the value respects every threshold given.",
)
async def record_metric(
    payload: QualityMetricCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    metric = await QualityService(session, ctx).record_metric(payload)
    return ok(QualityMetricRead.model_validate(metric), "Metric recorded")


# Defects

# PUBLIC_INTERFACE
@router.get("/defects/summary", response_model=ApiResponse[DefectBreakdown], summary="Defects by category and severity")
async def defect_summary(
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(await QualityService(session, ctx).defect_breakdown())


# PUBLIC_INTERFACE
@router.get("/defects", response_model=ApiResponse[List[DefectRead]], summary="List defects")
async def list_defects(
    checkpoint_id: Optional[UUID] = Query(None),
    severity: Optional[DefectSeverity] = Query(None),
    category: Optional[DefectCategory] = Query(None),
    resolution_status: Optional[DefectResolutionStatus] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await QualityService(session, ctx).list_defects(
        checkpoint_id=checkpoint_id,
        severity=_value(severity),
        category=_value(category),
        resolution_status=_value(resolution_status),
        limit=limit,
        offset=offset,
    )
    return ok_list(DefectRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/defects",
    response_model=ApiResponse[DefectRead],
    status_code=status.HTTP_201_CREATED,
    summary="Record defect",
)
async def record_defect(
    payload: DefectCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    defect = await QualityService(session, ctx).record_defect(payload)
    return ok(DefectRead.model_validate(defect), "Defect recorded")


# PUBLIC_INTERFACE
@router.post("/defects/{defect_id}/resolve", response_model=ApiResponse[DefectRead], summary="Resolve defect")
async def resolve_defect(
    payload: DefectResolve,
    defect_id: UUID = Path(..., description="Defect ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    defect = await QualityService(session, ctx).resolve_defect(defect_id, payload)
    return ok(DefectRead.model_validate(defect), "Defect resolved")


# Compliance

# PUBLIC_INTERFACE
@router.get("/compliance", response_model=ApiResponse[List[ComplianceRead]], summary="List compliance reports")
async def list_compliance(
    report_type: Optional[ComplianceType] = Query(None),
    status_filter: Optional[ComplianceStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await QualityService(session, ctx).list_compliance(
        report_type=_value(report_type), status=_value(status_filter), limit=limit, offset=offset
    )
    return ok_list(ComplianceRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/compliance",
    response_model=ApiResponse[ComplianceRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create compliance report",
)
async def create_compliance(
    payload: ComplianceCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    report = await QualityService(session, ctx).create_compliance(payload)
    return ok(ComplianceRead.model_validate(report), "Compliance report created")


# PUBLIC_INTERFACE
@router.get("/compliance/{report_id}", response_model=ApiResponse[ComplianceRead], summary="Get compliance report")
async def get_compliance(
    report_id: UUID = Path(..., description="Compliance report ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(ComplianceRead.model_validate(await QualityService(session, ctx).get_compliance(report_id)))


# PUBLIC_INTERFACE
@router.put("/compliance/{report_id}", response_model=ApiResponse[ComplianceRead], summary="Update compliance report")
async def update_compliance(
    payload: ComplianceUpdate,
    report_id: UUID = Path(..., description="Compliance report ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    report = await QualityService(session, ctx).update_compliance(report_id, payload)
    return ok(ComplianceRead.model_validate(report), "Compliance report updated")


# PUBLIC_INTERFACE
@router.delete("/compliance/{report_id}", response_model=ApiResponse[None], summary="Delete compliance report")
async def delete_compliance(
    report_id: UUID = Path(..., description="Compliance report ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await QualityService(session, ctx).delete_compliance(report_id)
    return ok(None, "Compliance report deleted")
