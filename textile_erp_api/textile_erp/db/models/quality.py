from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from textile_erp.db.base import Base, SoftDeleteMixin, TenantMixin, TimestampMixin, UUIDPkMixin


class Inspection(UUIDPkMixin, TenantMixin, SoftDeleteMixin, TimestampMixin, Base):
    """Quality inspection of a product, order or batch."""
    __tablename__ = "inspections"
    __table_args__ = (
        UniqueConstraint("company_id", "inspection_number", name="uq_inspections_company_number"),
    )

    inspection_number: Mapped[str] = mapped_column(Text, nullable=False)
    inspection_type: Mapped[str] = mapped_column(Text, nullable=False)
    reference_type: Mapped[str] = mapped_column(Text, nullable=False)
    reference_id: Mapped[str] = mapped_column(Text, nullable=False)
    location_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    inspector_id: Mapped[Optional[UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    inspector_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    scheduled_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, server_default="PENDING")
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    overall_result: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quality_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    inspector_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recommendations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    checkpoints: Mapped[List["InspectionCheckpoint"]] = relationship(
        "InspectionCheckpoint",
        order_by="InspectionCheckpoint.order_index",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class InspectionCheckpoint(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Single check evaluated as part of an inspection."""
    __tablename__ = "inspection_checkpoints"

    inspection_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    evaluation_type: Mapped[str] = mapped_column(Text, nullable=False)
    result: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class QualityCheckpoint(UUIDPkMixin, TenantMixin, SoftDeleteMixin, TimestampMixin, Base):
    """Quality gate on the shop floor (incoming, in-process, final, packaging, ...)."""
    __tablename__ = "quality_checkpoints"
    __table_args__ = (
        UniqueConstraint("company_id", "checkpoint_code", name="uq_quality_checkpoints_company_code"),
    )

    checkpoint_code: Mapped[str] = mapped_column(Text, nullable=False)
    checkpoint_type: Mapped[str] = mapped_column(Text, nullable=False)
    checkpoint_name: Mapped[str] = mapped_column(Text, nullable=False)
    inspector_name: Mapped[str] = mapped_column(Text, nullable=False)
    inspection_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    order_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("orders.id", ondelete="SET NULL"), nullable=True
    )
    location_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    product_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )
    batch_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    lot_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sample_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tested_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    overall_score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, server_default="PENDING")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class QualityDefect(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Defect recorded at a checkpoint."""
    __tablename__ = "quality_defects"

    defect_code: Mapped[str] = mapped_column(Text, nullable=False)
    checkpoint_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("quality_checkpoints.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[Optional[UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )
    defect_category: Mapped[str] = mapped_column(Text, nullable=False)
    defect_type: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    batch_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    affected_items: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolution_status: Mapped[str] = mapped_column(Text, nullable=False, server_default="OPEN")
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolved_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class QualityMetric(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Measured value at a checkpoint, compared against optional thresholds."""
    __tablename__ = "quality_metrics"

    metric_code: Mapped[str] = mapped_column(Text, nullable=False)
    checkpoint_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("quality_checkpoints.id", ondelete="CASCADE"), nullable=False, index=True
    )
    metric_name: Mapped[str] = mapped_column(Text, nullable=False)
    metric_value: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    unit_of_measure: Mapped[str] = mapped_column(Text, nullable=False)
    min_threshold: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 4), nullable=True)
    max_threshold: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 4), nullable=True)
    is_within_range: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class ComplianceReport(UUIDPkMixin, TenantMixin, SoftDeleteMixin, TimestampMixin, Base):
    """Certification or social-compliance audit outcome (ISO 9001, OEKO-TEX, GOTS, ...)."""
    __tablename__ = "compliance_reports"

    report_code: Mapped[str] = mapped_column(Text, nullable=False)
    report_type: Mapped[str] = mapped_column(Text, nullable=False)
    report_date: Mapped[date] = mapped_column(Date, nullable=False)
    auditor_name: Mapped[str] = mapped_column(Text, nullable=False)
    certification: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    validity_period: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    findings: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recommendations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    document_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
