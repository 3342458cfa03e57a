from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import (
    BreakdownPriority,
    BreakdownSeverity,
    BreakdownStatus,
    MachineStatus,
    MaintenanceType,
    OperationalStatus,
)


class MachineCreate(BaseModel):
    """Register a machine; it starts in status NEW."""
    name: str = Field(..., min_length=1, max_length=200)
    machine_type: Optional[str] = Field(None, description="e.g. LOOM, KNITTING, DYEING, STITCHING")
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    serial_number: Optional[str] = None
    purchase_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    location_id: Optional[UUID] = None
    specifications: Dict[str, Any] = Field(default_factory=dict)


class MachineUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    machine_type: Optional[str] = None
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    serial_number: Optional[str] = None
    purchase_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    location_id: Optional[UUID] = None
    operational_status: Optional[OperationalStatus] = None
    specifications: Optional[Dict[str, Any]] = None


class MachineStatusChange(BaseModel):
    status: MachineStatus
    reason: Optional[str] = None


class OperatorAssignment(BaseModel):
    """Assign (or clear, with null) the machine operator."""
    operator_id: Optional[UUID] = None


class MachineStatusHistoryRead(ORMModel):
    id: UUID
    machine_id: UUID
    previous_status: Optional[MachineStatus] = None
    new_status: MachineStatus
    reason: Optional[str] = None
    changed_by: Optional[UUID] = None
    created_at: datetime


class MachineRead(ORMModel):
    id: UUID
    machine_code: str
    name: str
    machine_type: Optional[str] = None
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    serial_number: Optional[str] = None
    purchase_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    location_id: Optional[UUID] = None
    status: MachineStatus
    operational_status: OperationalStatus
    current_operator_id: Optional[UUID] = None
    specifications: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool
    created_at: datetime
    updated_at: datetime


class MachineDetail(MachineRead):
    recent_history: List[MachineStatusHistoryRead] = Field(default_factory=list)


class BreakdownCreate(BaseModel):
    machine_id: UUID
    severity: BreakdownSeverity
    priority: BreakdownPriority = BreakdownPriority.MEDIUM
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    breakdown_time: Optional[datetime] = Field(None, description="Defaults to now")
    assigned_technician: Optional[str] = None


class BreakdownUpdate(BaseModel):
    severity: Optional[BreakdownSeverity] = None
    priority: Optional[BreakdownPriority] = None
    status: Optional[BreakdownStatus] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_technician: Optional[str] = None
    resolution_notes: Optional[str] = None


class BreakdownRead(ORMModel):
    id: UUID
    ticket_code: str
    machine_id: UUID
    severity: BreakdownSeverity
    priority: BreakdownPriority
    status: BreakdownStatus
    title: str
    description: Optional[str] = None
    breakdown_time: datetime
    assigned_technician: Optional[str] = None
    resolution_notes: Optional[str] = None
    resolved_time: Optional[datetime] = None
    downtime_hours: Optional[Decimal] = None
    reported_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class ScheduleCreate(BaseModel):
    machine_id: UUID
    maintenance_type: MaintenanceType
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    frequency_days: Optional[int] = Field(None, gt=0)
    next_due: datetime
    estimated_hours: Optional[Decimal] = Field(None, ge=0)
    assigned_technician: Optional[str] = None
    checklist: List[Any] = Field(default_factory=list)
    parts_required: List[Any] = Field(default_factory=list)


class ScheduleUpdate(BaseModel):
    maintenance_type: Optional[MaintenanceType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    frequency_days: Optional[int] = Field(None, gt=0)
    next_due: Optional[datetime] = None
    estimated_hours: Optional[Decimal] = Field(None, ge=0)
    assigned_technician: Optional[str] = None
    checklist: Optional[List[Any]] = None
    parts_required: Optional[List[Any]] = None
    is_active: Optional[bool] = None


class ScheduleRead(ORMModel):
    id: UUID
    schedule_code: str
    machine_id: UUID
    maintenance_type: MaintenanceType
    title: str
    description: Optional[str] = None
    frequency_days: Optional[int] = None
    last_completed: Optional[datetime] = None
    next_due: datetime
    estimated_hours: Optional[Decimal] = None
    assigned_technician: Optional[str] = None
    checklist: List[Any] = Field(default_factory=list)
    parts_required: List[Any] = Field(default_factory=list)
    is_active: bool
    created_at: datetime
    updated_at: datetime


class RecordCreate(BaseModel):
    machine_id: UUID
    schedule_id: Optional[UUID] = None
    maintenance_type: MaintenanceType
    performed_date: datetime
    performed_by: Optional[str] = None
    duration_hours: Optional[Decimal] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    parts_used: List[Any] = Field(default_factory=list)
    notes: Optional[str] = None
    next_maintenance_date: Optional[datetime] = None


class RecordRead(ORMModel):
    id: UUID
    record_code: str
    machine_id: UUID
    schedule_id: Optional[UUID] = None
    maintenance_type: MaintenanceType
    performed_date: datetime
    performed_by: Optional[str] = None
    duration_hours: Optional[Decimal] = None
    cost: Optional[Decimal] = None
    parts_used: List[Any] = Field(default_factory=list)
    notes: Optional[str] = None
    next_maintenance_date: Optional[datetime] = None
    created_at: datetime


class MachineAnalytics(BaseModel):
    total_machines: int
    by_status: Dict[str, int]
    active_breakdowns: int
    maintenance_due_7_days: int
    overdue_maintenance: int
