from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import MANAGERS, TenantContext, get_tenant_context, get_tenant_session, require_roles
from textile_erp.schemas.common import ApiResponse, ok, ok_list
from textile_erp.schemas.enums import BreakdownSeverity, BreakdownStatus, MachineStatus
from textile_erp.schemas.machines import (
    BreakdownCreate,
    BreakdownRead,
    BreakdownUpdate,
    MachineAnalytics,
    MachineCreate,
    MachineDetail,
    MachineRead,
    MachineStatusChange,
    MachineStatusHistoryRead,
    MachineUpdate,
    OperatorAssignment,
    RecordCreate,
    RecordRead,
    ScheduleCreate,
    ScheduleRead,
    ScheduleUpdate,
)
from textile_erp.services.machines import MachineService

router = APIRouter(prefix="/machines", tags=["Machines"])

RECENT_HISTORY = 10


# PUBLIC_INTERFACE
@router.get(
    "/analytics",
    response_model=ApiResponse[MachineAnalytics],
    summary="Machine analytics",
    description="Active machines, counts by status, open breakdowns, due and overdue maintenance.",
)
async def machine_analytics(
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    return ok(await MachineService(session, ctx).analytics())


# Breakdowns

# PUBLIC_INTERFACE
@router.get("/breakdowns", response_model=ApiResponse[List[BreakdownRead]], summary="List breakdown reports")
async def list_breakdowns(
    machine_id: Optional[UUID] = Query(None),
    status_filter: Optional[BreakdownStatus] = Query(None, alias="status"),
    severity: Optional[BreakdownSeverity] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await MachineService(session, ctx).list_breakdowns(
        machine_id=machine_id,
        status=status_filter.value if status_filter else None,
        severity=severity.value if severity else None,
        limit=limit,
        offset=offset,
    )
    return ok_list(BreakdownRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/breakdowns",
    response_model=ApiResponse[BreakdownRead],
    status_code=status.HTTP_201_CREATED,
    summary="Report breakdown",
    description="Opens a TKT#### ticket. A CRITICAL breakdown puts the machine UNDER_REPAIR.",
)
async def report_breakdown(
    payload: BreakdownCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    report = await MachineService(session, ctx).report_breakdown(payload)
    return ok(BreakdownRead.model_validate(report), "Breakdown reported")


# PUBLIC_INTERFACE
@router.get("/breakdowns/{breakdown_id}", response_model=ApiResponse[BreakdownRead], summary="Get breakdown report")
async def get_breakdown(
    breakdown_id: UUID = Path(..., description="Breakdown report ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    return ok(BreakdownRead.model_validate(await MachineService(session, ctx).get_breakdown(breakdown_id)))


# PUBLIC_INTERFACE
@router.put(
    "/breakdowns/{breakdown_id}",
    response_model=ApiResponse[BreakdownRead],
    summary="Update breakdown report",
    description="Resolving stamps resolved_time, computes downtime_hours and sets the machine IDLE.",
)
async def update_breakdown(
    payload: BreakdownUpdate,
    breakdown_id: UUID = Path(..., description="Breakdown report ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    report = await MachineService(session, ctx).update_breakdown(breakdown_id, payload)
    return ok(BreakdownRead.model_validate(report), "Breakdown updated")


# Maintenance

# PUBLIC_INTERFACE
@router.get(
    "/maintenance/schedules",
    response_model=ApiResponse[List[ScheduleRead]],
    summary="List maintenance schedules",
    description="Active schedules ordered by next_due; due_within_days keeps those due before now + N days.",
)
async def list_schedules(
    machine_id: Optional[UUID] = Query(None),
    due_within_days: Optional[int] = Query(None, ge=0),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await MachineService(session, ctx).list_schedules(
        machine_id=machine_id, due_within_days=due_within_days, limit=limit, offset=offset
    )
    return ok_list(ScheduleRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/maintenance/schedules",
    response_model=ApiResponse[ScheduleRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create maintenance schedule",
)
async def create_schedule(
    payload: ScheduleCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    schedule = await MachineService(session, ctx).create_schedule(payload)
    return ok(ScheduleRead.model_validate(schedule), "Maintenance schedule created")


# PUBLIC_INTERFACE
@router.put(
    "/maintenance/schedules/{schedule_id}",
    response_model=ApiResponse[ScheduleRead],
    summary="Update maintenance schedule",
)
async def update_schedule(
    payload: ScheduleUpdate,
    schedule_id: UUID = Path(..., description="Schedule ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    schedule = await MachineService(session, ctx).update_schedule(schedule_id, payload)
    return ok(ScheduleRead.model_validate(schedule), "Maintenance schedule updated")


# PUBLIC_INTERFACE
@router.get("/maintenance/records", response_model=ApiResponse[List[RecordRead]], summary="List maintenance records")
async def list_records(
    machine_id: Optional[UUID] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await MachineService(session, ctx).list_records(machine_id=machine_id, limit=limit, offset=offset)
    return ok_list(RecordRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "/maintenance/records",
    response_model=ApiResponse[RecordRead],
    status_code=status.HTTP_201_CREATED,
    summary="Record maintenance",
    description="A linked schedule gets last_completed and its next due date rolled forward.",
)
async def record_maintenance(
    payload: RecordCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    record = await MachineService(session, ctx).record_maintenance(payload)
    return ok(RecordRead.model_validate(record), "Maintenance recorded")


# Machines

# PUBLIC_INTERFACE
@router.get("", response_model=ApiResponse[List[MachineRead]], summary="List machines")
async def list_machines(
    location_id: Optional[UUID] = Query(None),
    machine_type: Optional[str] = Query(None),
    status_filter: Optional[MachineStatus] = Query(None, alias="status"),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Match name, code, type or manufacturer"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await MachineService(session, ctx).list_machines(
        location_id=location_id,
        machine_type=machine_type,
        status=status_filter.value if status_filter else None,
        is_active=is_active,
        search=search,
        limit=limit,
        offset=offset,
    )
    return ok_list(MachineRead, rows)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ApiResponse[MachineRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create machine",
    description="Code MCH#### is assigned; the machine starts NEW and FREE.",
)
async def create_machine(
    payload: MachineCreate,
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    machine = await MachineService(session, ctx).create_machine(payload)
    return ok(MachineRead.model_validate(machine), "Machine created")


# PUBLIC_INTERFACE
@router.get(
    "/{machine_id}",
    response_model=ApiResponse[MachineDetail],
    summary="Get machine",
    description="Machine with its most recent status changes.",
)
async def get_machine(
    machine_id: UUID = Path(..., description="Machine ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    service = MachineService(session, ctx)
    machine = await service.get_machine(machine_id)
    history = await service.get_history(machine_id, limit=RECENT_HISTORY)
    detail = MachineDetail.model_validate(machine)
    detail.recent_history = [MachineStatusHistoryRead.model_validate(h) for h in history]
    return ok(detail)


# PUBLIC_INTERFACE
@router.put("/{machine_id}", response_model=ApiResponse[MachineRead], summary="Update machine")
async def update_machine(
    payload: MachineUpdate,
    machine_id: UUID = Path(..., description="Machine ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    machine = await MachineService(session, ctx).update_machine(machine_id, payload)
    return ok(MachineRead.model_validate(machine), "Machine updated")


# PUBLIC_INTERFACE
@router.patch(
    "/{machine_id}/status",
    response_model=ApiResponse[MachineRead],
    summary="Change machine status",
    description="Writes a status history entry. DECOMMISSIONED machines can't change status.",
)
async def change_machine_status(
    payload: MachineStatusChange,
    machine_id: UUID = Path(..., description="Machine ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    machine = await MachineService(session, ctx).change_status(machine_id, payload.status.value, payload.reason)
    return ok(MachineRead.model_validate(machine), "Machine status updated")


# PUBLIC_INTERFACE
@router.post(
    "/{machine_id}/assign-operator",
    response_model=ApiResponse[MachineRead],
    summary="Assign operator",
    description="The operator must be an active member of the company; null clears the assignment.",
)
async def assign_operator(
    payload: OperatorAssignment,
    machine_id: UUID = Path(..., description="Machine ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    machine = await MachineService(session, ctx).assign_operator(machine_id, payload.operator_id)
    return ok(MachineRead.model_validate(machine), "Operator assigned")


# PUBLIC_INTERFACE
@router.get(
    "/{machine_id}/history",
    response_model=ApiResponse[List[MachineStatusHistoryRead]],
    summary="Machine status history",
)
async def machine_history(
    machine_id: UUID = Path(..., description="Machine ID"),
    limit: int = Query(50, ge=1, le=500),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(get_tenant_context),
):
    rows = await MachineService(session, ctx).get_history(machine_id, limit=limit)
    return ok_list(MachineStatusHistoryRead, rows)


# PUBLIC_INTERFACE
@router.delete(
    "/{machine_id}",
    response_model=ApiResponse[None],
    summary="Delete machine",
    description="Deactivates and decommissions the machine; refused while breakdowns are open.",
)
async def delete_machine(
    machine_id: UUID = Path(..., description="Machine ID"),
    session: AsyncSession = Depends(get_tenant_session),
    ctx: TenantContext = Depends(require_roles(*MANAGERS)),
):
    await MachineService(session, ctx).delete_machine(machine_id)
    return ok(None, "Machine deleted")
