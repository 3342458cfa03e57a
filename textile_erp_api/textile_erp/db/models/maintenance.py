from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from textile_erp.db.base import Base, SoftDeleteMixin, TenantMixin, TimestampMixin, UUIDPkMixin


class Machine(UUIDPkMixin, TenantMixin, SoftDeleteMixin, TimestampMixin, Base):
    """Production machine (loom, knitting, dyeing, stitching, ...)."""
    __tablename__ = "machines"
    __table_args__ = (
        UniqueConstraint("company_id", "machine_code", name="uq_machines_company_code"),
    )

    machine_code: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    machine_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    model: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    manufacturer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    serial_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    purchase_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    warranty_expiry: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    location_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(Text, nullable=False, server_default="NEW")
    operational_status: Mapped[str] = mapped_column(Text, nullable=False, server_default="FREE")
    current_operator_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    specifications: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)


class MachineStatusHistory(UUIDPkMixin, TenantMixin, Base):
    """One row per machine status change."""
    __tablename__ = "machine_status_history"

    machine_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    previous_status: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    new_status: Mapped[str] = mapped_column(Text, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    changed_by: Mapped[Optional[UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, nullable=False
    )


class BreakdownReport(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Breakdown ticket raised against a machine."""
    __tablename__ = "breakdown_reports"

    ticket_code: Mapped[str] = mapped_column(Text, nullable=False)
    machine_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    severity: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(Text, nullable=False, server_default="MEDIUM")
    status: Mapped[str] = mapped_column(Text, nullable=False, server_default="OPEN")
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    breakdown_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    assigned_technician: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolved_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    downtime_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    reported_by: Mapped[Optional[UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)


class MaintenanceSchedule(UUIDPkMixin, TenantMixin, SoftDeleteMixin, TimestampMixin, Base):
    """Recurring preventive maintenance plan for a machine."""
    __tablename__ = "maintenance_schedules"

    schedule_code: Mapped[str] = mapped_column(Text, nullable=False)
    machine_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    maintenance_type: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    frequency_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    last_completed: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    next_due: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    estimated_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    assigned_technician: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    checklist: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    parts_required: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)


class MaintenanceRecord(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Maintenance actually performed on a machine."""
    __tablename__ = "maintenance_records"

    record_code: Mapped[str] = mapped_column(Text, nullable=False)
    machine_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    schedule_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("maintenance_schedules.id", ondelete="SET NULL"), nullable=True
    )
    maintenance_type: Mapped[str] = mapped_column(Text, nullable=False)
    performed_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    performed_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2), nullable=True)
    parts_used: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    next_maintenance_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
