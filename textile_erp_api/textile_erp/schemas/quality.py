from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from textile_erp.schemas.common import ORMModel
from textile_erp.schemas.enums import (
    CheckpointStatus,
    CheckpointType,
    ComplianceStatus,
    ComplianceType,
    DefectCategory,
    DefectResolutionStatus,
    DefectSeverity,
    EvaluationType,
    InspectionReferenceType,
    InspectionResult,
    InspectionStatus,
    InspectionType,
)


# Inspections

class InspectionCheckpointIn(BaseModel):
    id: Optional[UUID] = Field(None, description="Existing checkpoint to update; omit to add")
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    evaluation_type: EvaluationType = EvaluationType.PASS_FAIL
    result: Optional[str] = None
    notes: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)


class InspectionCheckpointRead(ORMModel):
    id: UUID
    inspection_id: UUID
    name: str
    description: Optional[str] = None
    evaluation_type: EvaluationType
    result: Optional[str] = None
    notes: Optional[str] = None
    order_index: int


class InspectionCreate(BaseModel):
    inspection_type: InspectionType
    reference_type: InspectionReferenceType
    reference_id: str = Field(..., min_length=1)
    location_id: Optional[UUID] = None
    inspector_name: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    inspector_notes: Optional[str] = None
    checkpoints: List[InspectionCheckpointIn] = Field(default_factory=list)


class InspectionUpdate(BaseModel):
    inspector_name: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    location_id: Optional[UUID] = None
    inspector_notes: Optional[str] = None
    recommendations: Optional[str] = None


class InspectionComplete(BaseModel):
    result: InspectionResult
    quality_score: Optional[Decimal] = Field(None, ge=0, le=100)
    inspector_notes: Optional[str] = None
    recommendations: Optional[str] = None


class InspectionRead(ORMModel):
    id: UUID
    inspection_number: str
    inspection_type: InspectionType
    reference_type: InspectionReferenceType
    reference_id: str
    location_id: Optional[UUID] = None
    inspector_id: Optional[UUID] = None
    inspector_name: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    status: InspectionStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    overall_result: Optional[InspectionResult] = None
    quality_score: Optional[Decimal] = None
    inspector_notes: Optional[str] = None
    recommendations: Optional[str] = None
    is_active: bool
    checkpoints: List[InspectionCheckpointRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class InspectionMetrics(BaseModel):
    total: int
    passed: int
    failed: int
    conditional: int
    pass_rate: float = Field(..., description="Percent of all inspections in range that passed")
    average_inspection_minutes: Optional[float] = None


# Checkpoints

class QualityCheckpointCreate(BaseModel):
    checkpoint_type: CheckpointType
    checkpoint_name: str = Field(..., min_length=1, max_length=255)
    inspector_name: str = Field(..., min_length=1, max_length=200)
    inspection_date: datetime
    order_id: Optional[UUID] = None
    location_id: Optional[UUID] = None
    product_id: Optional[UUID] = None
    batch_number: Optional[str] = None
    lot_number: Optional[str] = None
    sample_size: Optional[int] = Field(None, ge=0)
    tested_quantity: Optional[int] = Field(None, ge=0)
    overall_score: Optional[Decimal] = Field(None, ge=0, le=100)
    status: CheckpointStatus = CheckpointStatus.PENDING
    notes: Optional[str] = None


class QualityCheckpointUpdate(BaseModel):
    checkpoint_type: Optional[CheckpointType] = None
    checkpoint_name: Optional[str] = Field(None, min_length=1, max_length=255)
    inspector_name: Optional[str] = Field(None, min_length=1, max_length=200)
    inspection_date: Optional[datetime] = None
    batch_number: Optional[str] = None
    lot_number: Optional[str] = None
    sample_size: Optional[int] = Field(None, ge=0)
    tested_quantity: Optional[int] = Field(None, ge=0)
    overall_score: Optional[Decimal] = Field(None, ge=0, le=100)
    status: Optional[CheckpointStatus] = None
    notes: Optional[str] = None


class QualityCheckpointRead(ORMModel):
    id: UUID
    checkpoint_code: str
    checkpoint_type: CheckpointType
    checkpoint_name: str
    inspector_name: str
    inspection_date: datetime
    order_id: Optional[UUID] = None
    location_id: Optional[UUID] = None
    product_id: Optional[UUID] = None
    batch_number: Optional[str] = None
    lot_number: Optional[str] = None
    sample_size: Optional[int] = None
    tested_quantity: Optional[int] = None
    overall_score: Optional[Decimal] = None
    status: CheckpointStatus
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# Defects

class DefectCreate(BaseModel):
    checkpoint_id: UUID
    product_id: Optional[UUID] = None
    defect_category: DefectCategory
    defect_type: str = Field(..., min_length=1, max_length=120)
    severity: DefectSeverity
    quantity: int = Field(..., gt=0)
    batch_number: Optional[str] = None
    affected_items: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None


class DefectResolve(BaseModel):
    resolution_notes: Optional[str] = None
    resolved_by: Optional[str] = None


class DefectRead(ORMModel):
    id: UUID
    defect_code: str
    checkpoint_id: UUID
    product_id: Optional[UUID] = None
    defect_category: DefectCategory
    defect_type: str
    severity: DefectSeverity
    quantity: int
    batch_number: Optional[str] = None
    affected_items: Optional[int] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    resolution_status: DefectResolutionStatus
    resolution_notes: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime


# Metrics

class QualityMetricCreate(BaseModel):
    checkpoint_id: UUID
    metric_name: str = Field(..., min_length=1, max_length=120)
    metric_value: Decimal
    unit_of_measure: str = Field(..., min_length=1, max_length=20)
    min_threshold: Optional[Decimal] = None
    max_threshold: Optional[Decimal] = None
    notes: Optional[str] = None


class QualityMetricRead(ORMModel):
    id: UUID
    metric_code: str
    checkpoint_id: UUID
    metric_name: str
    metric_value: Decimal
    unit_of_measure: str
    min_threshold: Optional[Decimal] = None
    max_threshold: Optional[Decimal] = None
    is_within_range: bool
    notes: Optional[str] = None
    created_at: datetime


# Compliance

class ComplianceCreate(BaseModel):
    report_type: ComplianceType
    report_date: date
    auditor_name: str = Field(..., min_length=1, max_length=200)
    certification: Optional[str] = None
    validity_period: Optional[str] = None
    status: ComplianceStatus = ComplianceStatus.PENDING_REVIEW
    findings: Optional[str] = None
    recommendations: Optional[str] = None
    document_url: Optional[str] = None


class ComplianceUpdate(BaseModel):
    report_type: Optional[ComplianceType] = None
    report_date: Optional[date] = None
    auditor_name: Optional[str] = Field(None, min_length=1, max_length=200)
    certification: Optional[str] = None
    validity_period: Optional[str] = None
    status: Optional[ComplianceStatus] = None
    findings: Optional[str] = None
    recommendations: Optional[str] = None
    document_url: Optional[str] = None


class ComplianceRead(ORMModel):
    id: UUID
    report_code: str
    report_type: ComplianceType
    report_date: date
    auditor_name: str
    certification: Optional[str] = None
    validity_period: Optional[str] = None
    status: ComplianceStatus
    findings: Optional[str] = None
    recommendations: Optional[str] = None
    document_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class DefectBreakdown(BaseModel):
    by_category: Dict[str, int] = Field(default_factory=dict)
    by_severity: Dict[str, int] = Field(default_factory=dict)
