from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from textile_erp.core.errors import BusinessRuleError, NotFoundError
from textile_erp.db.models.maintenance import (
    BreakdownReport,
    Machine,
    MachineStatusHistory,
    MaintenanceRecord,
    MaintenanceSchedule,
)
from textile_erp.repositories.companies import MembershipRepository
from textile_erp.repositories.locations import LocationRepository
from textile_erp.repositories.maintenance import (
    BreakdownRepository,
    MachineRepository,
    MachineStatusHistoryRepository,
    MaintenanceRecordRepository,
    MaintenanceScheduleRepository,
)
from textile_erp.schemas.machines import (
    BreakdownCreate,
    BreakdownUpdate,
    MachineAnalytics,
    MachineCreate,
    MachineUpdate,
    RecordCreate,
    ScheduleCreate,
    ScheduleUpdate,
)
from textile_erp.services.base import TenantService, apply_changes, dump
from textile_erp.services.codes import MACHINE_CODE, RECORD_CODE, SCHEDULE_CODE, TICKET_CODE
from textile_erp.services.pricing import money

logger = logging.getLogger(__name__)

TERMINAL_MACHINE_STATUS = "DECOMMISSIONED"
DUE_SOON_DAYS = 7


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


# PUBLIC_INTERFACE
def machine_status_changes(current: Optional[str], target: str) -> bool:
    """
    True when moving to `target` is a real change.

    Any status may follow any other; DECOMMISSIONED machines stay decommissioned.
    """
    if current == target:
        return False
    if current == TERMINAL_MACHINE_STATUS:
        raise BusinessRuleError("Cannot change the status of a decommissioned machine")
    return True


# PUBLIC_INTERFACE
def downtime_hours(start: datetime, end: datetime) -> Decimal:
    """Hours between two instants, rounded to 2 places, never negative."""
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    seconds = max((end - start).total_seconds(), 0)
    return money(Decimal(str(seconds)) / Decimal("3600"))


# PUBLIC_INTERFACE
def next_due_after(performed: datetime, frequency_days: Optional[int], explicit: Optional[datetime] = None) -> Optional[datetime]:
    """Explicit next date wins; otherwise performed + frequency; None when neither is known."""
    if explicit is not None:
        return explicit
    if frequency_days:
        return performed + timedelta(days=frequency_days)
    return None


class MachineService(TenantService):
    """Machines, their status history, breakdowns and maintenance."""

    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.machines: MachineRepository = self.repo(MachineRepository)
        self.history: MachineStatusHistoryRepository = self.repo(MachineStatusHistoryRepository)
        self.breakdowns: BreakdownRepository = self.repo(BreakdownRepository)
        self.schedules: MaintenanceScheduleRepository = self.repo(MaintenanceScheduleRepository)
        self.records: MaintenanceRecordRepository = self.repo(MaintenanceRecordRepository)

    async def _record_status(self, machine: Machine, previous: Optional[str], new: str, reason: Optional[str]) -> None:
        await self.history.create(
            MachineStatusHistory(
                machine_id=machine.id,
                previous_status=previous,
                new_status=new,
                reason=reason,
                changed_by=self.ctx.user_id,
            )
        )

    async def _set_status(self, machine: Machine, target: str, reason: Optional[str]) -> bool:
        if not machine_status_changes(machine.status, target):
            return False
        previous = machine.status
        machine.status = target
        await self._record_status(machine, previous, target, reason)
        logger.info("Machine %s status %s -> %s (%s)", machine.machine_code, previous, target, reason or "-")
        return True

    async def _check_location(self, location_id: Optional[UUID]) -> None:
        if location_id is not None:
            self.require(await self.repo(LocationRepository).get_active(location_id), "Location", location_id)

    # Machines

    async def list_machines(self, **filters) -> List[Machine]:
        return await self.machines.list_machines(**filters)

    async def get_machine(self, machine_id: UUID) -> Machine:
        return self.require(await self.machines.get(machine_id), "Machine", machine_id)

    async def get_history(self, machine_id: UUID, limit: int = 50) -> List[MachineStatusHistory]:
        await self.get_machine(machine_id)
        return await self.history.list_for_machine(machine_id, limit=limit)

    # PUBLIC_INTERFACE
    async def create_machine(self, payload: MachineCreate) -> Machine:
        """Register a machine as NEW/FREE and write its first history row."""
        await self._check_location(payload.location_id)
        code = await self.next_code(self.machines, Machine.machine_code, *MACHINE_CODE)
        machine = await self.machines.create(
            Machine(machine_code=code, status="NEW", operational_status="FREE", is_active=True, **dump(payload))
        )
        await self._record_status(machine, None, "NEW", "Machine created")
        await self.commit()
        await self.session.refresh(machine)
        logger.info("Created machine %s (%s)", code, machine.name)
        return machine

    async def update_machine(self, machine_id: UUID, payload: MachineUpdate) -> Machine:
        machine = await self.get_machine(machine_id)
        changes = dump(payload, exclude_unset=True)
        if "location_id" in changes:
            await self._check_location(changes["location_id"])
        for required in ("name", "operational_status", "specifications"):
            if changes.get(required, "") is None:
                changes.pop(required)
        apply_changes(machine, changes)
        await self.commit()
        await self.session.refresh(machine)
        logger.info("Updated machine %s", machine.machine_code)
        return machine

    # PUBLIC_INTERFACE
    async def change_status(self, machine_id: UUID, status: str, reason: Optional[str]) -> Machine:
        machine = await self.get_machine(machine_id)
        if await self._set_status(machine, status, reason):
            await self.commit()
            await self.session.refresh(machine)
        return machine

    # PUBLIC_INTERFACE
    async def assign_operator(self, machine_id: UUID, operator_id: Optional[UUID]) -> Machine:
        """Set or clear the current operator; the operator must be an active member of the company."""
        machine = await self.get_machine(machine_id)
        if operator_id is not None:
            membership = await MembershipRepository(self.session).get_active_membership(operator_id, self.company_id)
            if membership is None:
                raise NotFoundError("User", operator_id)
        machine.current_operator_id = operator_id
        machine.operational_status = "BUSY" if operator_id else "FREE"
        await self.commit()
        await self.session.refresh(machine)
        logger.info("Machine %s operator set to %s", machine.machine_code, operator_id or "-")
        return machine

    # PUBLIC_INTERFACE
    async def delete_machine(self, machine_id: UUID) -> None:
        """Decommission; refused while breakdowns are open or in progress."""
        machine = await self.get_machine(machine_id)
        if await self.breakdowns.count_active(machine.id):
            raise BusinessRuleError("Cannot delete machine with active breakdown reports")
        machine.is_active = False
        machine.operational_status = "UNAVAILABLE"
        await self._set_status(machine, TERMINAL_MACHINE_STATUS, "Machine deleted")
        await self.commit()
        logger.info("Decommissioned machine %s", machine.machine_code)

    async def analytics(self) -> MachineAnalytics:
        now = _now()
        return MachineAnalytics(
            total_machines=await self.machines.count_where(Machine.is_active.is_(True)),
            by_status=await self.machines.count_by_status(),
            active_breakdowns=await self.breakdowns.count_active(),
            maintenance_due_7_days=await self.schedules.count_due(
                after=now, before=now + timedelta(days=DUE_SOON_DAYS)
            ),
            overdue_maintenance=await self.schedules.count_due(before=now),
        )

    # Breakdowns

    async def list_breakdowns(self, **filters) -> List[BreakdownReport]:
        return await self.breakdowns.list_breakdowns(**filters)

    async def get_breakdown(self, breakdown_id: UUID) -> BreakdownReport:
        return self.require(await self.breakdowns.get(breakdown_id), "Breakdown report", breakdown_id)

    # PUBLIC_INTERFACE
    async def report_breakdown(self, payload: BreakdownCreate) -> BreakdownReport:
        """Open a TKT#### ticket; a CRITICAL breakdown puts the machine under repair."""
        machine = await self.get_machine(payload.machine_id)
        if not machine.is_active:
            raise BusinessRuleError("Cannot report a breakdown on an inactive machine")
        data = dump(payload)
        data["breakdown_time"] = data.get("breakdown_time") or _now()
        code = await self.next_code(self.breakdowns, BreakdownReport.ticket_code, *TICKET_CODE)
        report = await self.breakdowns.create(
            BreakdownReport(ticket_code=code, status="OPEN", reported_by=self.ctx.user_id, **data)
        )
        if report.severity == "CRITICAL":
            await self._set_status(machine, "UNDER_REPAIR", "Critical breakdown reported")
        await self.commit()
        await self.session.refresh(report)
        logger.info("Breakdown %s reported on %s (%s)", code, machine.machine_code, report.severity)
        return report

    # PUBLIC_INTERFACE
    async def update_breakdown(self, breakdown_id: UUID, payload: BreakdownUpdate) -> BreakdownReport:
        """Resolving a ticket stamps the time, computes downtime and idles the machine."""
        report = await self.get_breakdown(breakdown_id)
        changes = dump(payload, exclude_unset=True)
        for required in ("severity", "priority", "status", "title"):
            if changes.get(required, "") is None:
                changes.pop(required)
        resolving = changes.get("status") == "RESOLVED" and report.status != "RESOLVED"
        apply_changes(report, changes)
        if resolving:
            report.resolved_time = _now()
            report.downtime_hours = downtime_hours(report.breakdown_time, report.resolved_time)
            machine = await self.get_machine(report.machine_id)
            if machine.status != TERMINAL_MACHINE_STATUS:
                await self._set_status(machine, "IDLE", "Breakdown resolved")
        await self.commit()
        await self.session.refresh(report)
        logger.info("Updated breakdown %s (status=%s)", report.ticket_code, report.status)
        return report

    # Maintenance schedules

    async def list_schedules(self, *, machine_id: Optional[UUID] = None, due_within_days: Optional[int] = None,
                             limit: int = 100, offset: int = 0) -> List[MaintenanceSchedule]:
        due_before = _now() + timedelta(days=due_within_days) if due_within_days is not None else None
        return await self.schedules.list_schedules(
            machine_id=machine_id, due_before=due_before, limit=limit, offset=offset
        )

    async def create_schedule(self, payload: ScheduleCreate) -> MaintenanceSchedule:
        await self.get_machine(payload.machine_id)
        code = await self.next_code(self.schedules, MaintenanceSchedule.schedule_code, *SCHEDULE_CODE)
        schedule = await self.schedules.create(MaintenanceSchedule(schedule_code=code, is_active=True, **dump(payload)))
        await self.commit()
        await self.session.refresh(schedule)
        logger.info("Created maintenance schedule %s (%s)", code, schedule.maintenance_type)
        return schedule

    async def update_schedule(self, schedule_id: UUID, payload: ScheduleUpdate) -> MaintenanceSchedule:
        schedule = self.require(await self.schedules.get_active(schedule_id), "Maintenance schedule", schedule_id)
        changes = dump(payload, exclude_unset=True)
        for required in ("maintenance_type", "title", "next_due", "checklist", "parts_required", "is_active"):
            if changes.get(required, "") is None:
                changes.pop(required)
        apply_changes(schedule, changes)
        await self.commit()
        await self.session.refresh(schedule)
        logger.info("Updated maintenance schedule %s", schedule.schedule_code)
        return schedule

    # Maintenance records

    async def list_records(self, **filters) -> List[MaintenanceRecord]:
        return await self.records.list_records(**filters)

    # PUBLIC_INTERFACE
    async def record_maintenance(self, payload: RecordCreate) -> MaintenanceRecord:
        """Log performed maintenance; a linked schedule rolls forward to its next due date."""
        machine = await self.get_machine(payload.machine_id)
        schedule = None
        if payload.schedule_id is not None:
            schedule = self.require(
                await self.schedules.get_active(payload.schedule_id), "Maintenance schedule", payload.schedule_id
            )
            if schedule.machine_id != machine.id:
                raise BusinessRuleError("Maintenance schedule belongs to another machine")

        code = await self.next_code(self.records, MaintenanceRecord.record_code, *RECORD_CODE)
        record = await self.records.create(MaintenanceRecord(record_code=code, **dump(payload)))
        if schedule is not None:
            schedule.last_completed = payload.performed_date
            next_due = next_due_after(payload.performed_date, schedule.frequency_days, payload.next_maintenance_date)
            if next_due is not None:
                schedule.next_due = next_due
        await self.commit()
        await self.session.refresh(record)
        logger.info("Recorded maintenance %s on %s", code, machine.machine_code)
        return record
