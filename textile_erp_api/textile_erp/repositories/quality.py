from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_

from textile_erp.db.models.quality import (
    ComplianceReport,
    Inspection,
    InspectionCheckpoint,
    QualityCheckpoint,
    QualityDefect,
    QualityMetric,
)
from .base import TenantRepository


class InspectionRepository(TenantRepository[Inspection]):
    """Repository for quality inspections."""

    model = Inspection

    async def list_inspections(
        self,
        *,
        inspection_type: Optional[str] = None,
        status: Optional[str] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Inspection]:
        criteria = [Inspection.is_active.is_(True)]
        if inspection_type:
            criteria.append(Inspection.inspection_type == inspection_type)
        if status:
            criteria.append(Inspection.status == status)
        if reference_type:
            criteria.append(Inspection.reference_type == reference_type)
        if reference_id:
            criteria.append(Inspection.reference_id == reference_id)
        if start:
            criteria.append(Inspection.created_at >= start)
        if end:
            criteria.append(Inspection.created_at <= end)
        if search:
            like = f"%{search}%"
            criteria.append(
                or_(Inspection.inspection_number.ilike(like), Inspection.inspector_name.ilike(like))
            )
        return await self.list_where(*criteria, order_by=Inspection.created_at.desc(), limit=limit, offset=offset)


class InspectionCheckpointRepository(TenantRepository[InspectionCheckpoint]):
    model = InspectionCheckpoint

    async def get_for_inspection(self, inspection_id: UUID, checkpoint_id: UUID) -> Optional[InspectionCheckpoint]:
        stmt = self.scoped().where(
            InspectionCheckpoint.inspection_id == inspection_id,
            InspectionCheckpoint.id == checkpoint_id,
        )
        return await self.scalar_one_or_none(stmt)


class QualityCheckpointRepository(TenantRepository[QualityCheckpoint]):
    model = QualityCheckpoint

    async def list_checkpoints(
        self,
        *,
        checkpoint_type: Optional[str] = None,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[QualityCheckpoint]:
        criteria = [QualityCheckpoint.is_active.is_(True)]
        if checkpoint_type:
            criteria.append(QualityCheckpoint.checkpoint_type == checkpoint_type)
        if status:
            criteria.append(QualityCheckpoint.status == status)
        if start:
            criteria.append(QualityCheckpoint.inspection_date >= start)
        if end:
            criteria.append(QualityCheckpoint.inspection_date <= end)
        return await self.list_where(
            *criteria, order_by=QualityCheckpoint.inspection_date.desc(), limit=limit, offset=offset
        )


class QualityDefectRepository(TenantRepository[QualityDefect]):
    model = QualityDefect

    async def list_defects(
        self,
        *,
        checkpoint_id: Optional[UUID] = None,
        severity: Optional[str] = None,
        category: Optional[str] = None,
        resolution_status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[QualityDefect]:
        criteria = []
        if checkpoint_id:
            criteria.append(QualityDefect.checkpoint_id == checkpoint_id)
        if severity:
            criteria.append(QualityDefect.severity == severity)
        if category:
            criteria.append(QualityDefect.defect_category == category)
        if resolution_status:
            criteria.append(QualityDefect.resolution_status == resolution_status)
        return await self.list_where(*criteria, order_by=QualityDefect.created_at.desc(), limit=limit, offset=offset)


class QualityMetricRepository(TenantRepository[QualityMetric]):
    model = QualityMetric

    async def list_for_checkpoint(self, checkpoint_id: UUID) -> List[QualityMetric]:
        return await self.list_where(
            QualityMetric.checkpoint_id == checkpoint_id, order_by=QualityMetric.created_at
        )


class ComplianceReportRepository(TenantRepository[ComplianceReport]):
    model = ComplianceReport

    async def list_reports(
        self, *, report_type: Optional[str] = None, status: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> List[ComplianceReport]:
        criteria = [ComplianceReport.is_active.is_(True)]
        if report_type:
            criteria.append(ComplianceReport.report_type == report_type)
        if status:
            criteria.append(ComplianceReport.status == status)
        return await self.list_where(*criteria, order_by=ComplianceReport.report_date.desc(), limit=limit, offset=offset)
