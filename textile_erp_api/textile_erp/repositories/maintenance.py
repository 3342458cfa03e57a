from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, or_

from textile_erp.db.models.maintenance import (
    BreakdownReport,
    Machine,
    MachineStatusHistory,
    MaintenanceRecord,
    MaintenanceSchedule,
)
from .base import TenantRepository

ACTIVE_BREAKDOWN_STATUSES = ("OPEN", "IN_PROGRESS")


class MachineRepository(TenantRepository[Machine]):
    """Repository for machines."""

    model = Machine

    async def list_machines(
        self,
        *,
        location_id: Optional[UUID] = None,
        machine_type: Optional[str] = None,
        status: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Machine]:
        criteria = []
        if location_id:
            criteria.append(Machine.location_id == location_id)
        if machine_type:
            criteria.append(Machine.machine_type == machine_type)
        if status:
            criteria.append(Machine.status == status)
        if is_active is not None:
            criteria.append(Machine.is_active.is_(is_active))
        if search:
            like = f"%{search}%"
            criteria.append(
                or_(
                    Machine.name.ilike(like),
                    Machine.machine_code.ilike(like),
                    Machine.machine_type.ilike(like),
                    Machine.manufacturer.ilike(like),
                )
            )
        return await self.list_where(*criteria, order_by=Machine.machine_code, limit=limit, offset=offset)

    async def count_by_status(self) -> Dict[str, int]:
        stmt = (
            self.scoped(Machine.status, func.count(Machine.id))
            .where(Machine.is_active.is_(True))
            .group_by(Machine.status)
        )
        result = await self.execute(stmt)
        return {status: int(count) for status, count in result.all()}


class MachineStatusHistoryRepository(TenantRepository[MachineStatusHistory]):
    model = MachineStatusHistory

    async def list_for_machine(self, machine_id: UUID, limit: int = 50) -> List[MachineStatusHistory]:
        return await self.list_where(
            MachineStatusHistory.machine_id == machine_id,
            order_by=MachineStatusHistory.created_at.desc(),
            limit=limit,
        )


class BreakdownRepository(TenantRepository[BreakdownReport]):
    model = BreakdownReport

    async def list_breakdowns(
        self,
        *,
        machine_id: Optional[UUID] = None,
        status: Optional[str] = None,
        severity: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[BreakdownReport]:
        criteria = []
        if machine_id:
            criteria.append(BreakdownReport.machine_id == machine_id)
        if status:
            criteria.append(BreakdownReport.status == status)
        if severity:
            criteria.append(BreakdownReport.severity == severity)
        return await self.list_where(
            *criteria, order_by=BreakdownReport.breakdown_time.desc(), limit=limit, offset=offset
        )

    async def count_active(self, machine_id: Optional[UUID] = None) -> int:
        criteria = [BreakdownReport.status.in_(ACTIVE_BREAKDOWN_STATUSES)]
        if machine_id is not None:
            criteria.append(BreakdownReport.machine_id == machine_id)
        return await self.count_where(*criteria)


class MaintenanceScheduleRepository(TenantRepository[MaintenanceSchedule]):
    model = MaintenanceSchedule

    async def list_schedules(
        self,
        *,
        machine_id: Optional[UUID] = None,
        due_before: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[MaintenanceSchedule]:
        criteria = [MaintenanceSchedule.is_active.is_(True)]
        if machine_id:
            criteria.append(MaintenanceSchedule.machine_id == machine_id)
        if due_before is not None:
            criteria.append(MaintenanceSchedule.next_due <= due_before)
        return await self.list_where(
            *criteria, order_by=MaintenanceSchedule.next_due, limit=limit, offset=offset
        )

    async def count_due(self, *, after: Optional[datetime] = None, before: datetime) -> int:
        criteria = [MaintenanceSchedule.is_active.is_(True), MaintenanceSchedule.next_due < before]
        if after is not None:
            criteria.append(MaintenanceSchedule.next_due >= after)
        return await self.count_where(*criteria)


class MaintenanceRecordRepository(TenantRepository[MaintenanceRecord]):
    model = MaintenanceRecord

    async def list_records(
        self, *, machine_id: Optional[UUID] = None, limit: int = 100, offset: int = 0
    ) -> List[MaintenanceRecord]:
        criteria = [MaintenanceRecord.machine_id == machine_id] if machine_id else []
        return await self.list_where(
            *criteria, order_by=MaintenanceRecord.performed_date.desc(), limit=limit, offset=offset
        )
