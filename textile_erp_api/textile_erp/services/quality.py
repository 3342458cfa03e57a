from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from decimal import Decimal
from typing import FrozenSet, Iterable, List, Mapping, Optional
from uuid import UUID

from textile_erp.core.errors import BusinessRuleError
from textile_erp.db.models.quality import (
    ComplianceReport,
    Inspection,
    InspectionCheckpoint,
    QualityCheckpoint,
    QualityDefect,
    QualityMetric,
)
from textile_erp.repositories.catalog import ProductRepository
from textile_erp.repositories.locations import LocationRepository
from textile_erp.repositories.quality import (
    ComplianceReportRepository,
    InspectionCheckpointRepository,
    InspectionRepository,
    QualityCheckpointRepository,
    QualityDefectRepository,
    QualityMetricRepository,
)
from textile_erp.repositories.sales import OrderRepository
from textile_erp.schemas.quality import (
    ComplianceCreate,
    ComplianceUpdate,
    DefectBreakdown,
    DefectCreate,
    DefectResolve,
    InspectionCheckpointIn,
    InspectionComplete,
    InspectionCreate,
    InspectionMetrics,
    InspectionUpdate,
    QualityCheckpointCreate,
    QualityCheckpointUpdate,
    QualityMetricCreate,
)
from textile_erp.services.base import TenantService, apply_changes, dump
from textile_erp.services.codes import (
    CHECKPOINT_CODE,
    COMPLIANCE_CODE,
    DEFECT_CODE,
    INSPECTION_CODE,
    METRIC_CODE,
)
from textile_erp.services.orders import check_transition

logger = logging.getLogger(__name__)

COMPLETED_INSPECTION_STATUSES = frozenset({"PASSED", "FAILED", "CONDITIONAL"})
INSPECTION_TRANSITIONS: Mapping[str, FrozenSet[str]] = {
    "PENDING": frozenset({"IN_PROGRESS"}) | COMPLETED_INSPECTION_STATUSES,
    "IN_PROGRESS": COMPLETED_INSPECTION_STATUSES,
    "PASSED": frozenset(),
    "FAILED": frozenset(),
    "CONDITIONAL": frozenset(),
}
RESULT_STATUS = {"PASS": "PASSED", "FAIL": "FAILED", "CONDITIONAL": "CONDITIONAL"}


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


# PUBLIC_INTERFACE
def within_range(value: Decimal, min_threshold: Optional[Decimal], max_threshold: Optional[Decimal]) -> bool:
    """True when every given bound holds (bounds are inclusive)."""
    if min_threshold is not None and value < min_threshold:
        return False
    if max_threshold is not None and value > max_threshold:
        return False
    return True


# PUBLIC_INTERFACE
def summarize_inspections(inspections: Iterable[Inspection]) -> InspectionMetrics:
    """
    Counts by outcome, pass rate over all inspections and the mean duration.

    Duration only counts inspections that were both started and completed.
    """
    rows = list(inspections)
    counts = Counter(i.status for i in rows)
    total = len(rows)
    pass_rate = round(counts["PASSED"] / total * 100, 2) if total else 0.0

    durations = [
        (i.completed_at - i.started_at).total_seconds() / 60
        for i in rows
        if i.started_at is not None and i.completed_at is not None
    ]
    average = round(sum(durations) / len(durations), 2) if durations else None
    return InspectionMetrics(
        total=total,
        passed=counts["PASSED"],
        failed=counts["FAILED"],
        conditional=counts["CONDITIONAL"],
        pass_rate=pass_rate,
        average_inspection_minutes=average,
    )


class QualityService(TenantService):
    """Inspections, shop-floor checkpoints, defects, measured metrics and compliance reports."""

    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.inspections: InspectionRepository = self.repo(InspectionRepository)
        self.checkpoints: QualityCheckpointRepository = self.repo(QualityCheckpointRepository)
        self.defects: QualityDefectRepository = self.repo(QualityDefectRepository)
        self.metrics: QualityMetricRepository = self.repo(QualityMetricRepository)
        self.compliance: ComplianceReportRepository = self.repo(ComplianceReportRepository)

    async def _check_refs(self, *, location_id=None, product_id=None, order_id=None) -> None:
        if location_id is not None:
            self.require(await self.repo(LocationRepository).get_active(location_id), "Location", location_id)
        if product_id is not None:
            self.require(await self.repo(ProductRepository).get_active(product_id), "Product", product_id)
        if order_id is not None:
            self.require(await self.repo(OrderRepository).get_active(order_id), "Order", order_id)

    # Inspections

    async def list_inspections(self, **filters) -> List[Inspection]:
        return await self.inspections.list_inspections(**filters)

    async def get_inspection(self, inspection_id: UUID) -> Inspection:
        return self.require(await self.inspections.get_active(inspection_id), "Inspection", inspection_id)

    def _checkpoint(self, item: InspectionCheckpointIn, default_index: int) -> InspectionCheckpoint:
        values = dump(item, exclude=("id",))
        if values.get("order_index") is None:
            values["order_index"] = default_index
        return InspectionCheckpoint(company_id=self.company_id, **values)

    # PUBLIC_INTERFACE
    async def create_inspection(self, payload: InspectionCreate) -> Inspection:
        """Create a PENDING INS### inspection with its initial checkpoints."""
        await self._check_refs(location_id=payload.location_id)
        code = await self.next_code(self.inspections, Inspection.inspection_number, *INSPECTION_CODE)
        inspection = Inspection(
            inspection_number=code,
            status="PENDING",
            inspector_id=self.ctx.user_id,
            is_active=True,
            **dump(payload, exclude=("checkpoints",)),
        )
        inspection.checkpoints = [self._checkpoint(item, index) for index, item in enumerate(payload.checkpoints)]
        await self.inspections.create(inspection)
        await self.commit()
        await self.session.refresh(inspection)
        logger.info("Created inspection %s (%s) with %d checkpoints", code, inspection.inspection_type, len(payload.checkpoints))
        return inspection

    async def update_inspection(self, inspection_id: UUID, payload: InspectionUpdate) -> Inspection:
        inspection = await self.get_inspection(inspection_id)
        changes = dump(payload, exclude_unset=True)
        if "location_id" in changes:
            await self._check_refs(location_id=changes["location_id"])
        apply_changes(inspection, changes)
        await self.commit()
        await self.session.refresh(inspection)
        logger.info("Updated inspection %s", inspection.inspection_number)
        return inspection

    # PUBLIC_INTERFACE
    async def start_inspection(self, inspection_id: UUID) -> Inspection:
        inspection = await self.get_inspection(inspection_id)
        if check_transition(INSPECTION_TRANSITIONS, inspection.status, "IN_PROGRESS"):
            inspection.status = "IN_PROGRESS"
            inspection.started_at = _now()
            await self.commit()
            await self.session.refresh(inspection)
            logger.info("Started inspection %s", inspection.inspection_number)
        return inspection

    # PUBLIC_INTERFACE
    async def complete_inspection(self, inspection_id: UUID, payload: InspectionComplete) -> Inspection:
        """Record the outcome; PASS/FAIL/CONDITIONAL map to PASSED/FAILED/CONDITIONAL."""
        inspection = await self.get_inspection(inspection_id)
        result = payload.result.value
        if inspection.status in COMPLETED_INSPECTION_STATUSES:
            raise BusinessRuleError(f"Inspection {inspection.inspection_number} is already completed")
        check_transition(INSPECTION_TRANSITIONS, inspection.status, RESULT_STATUS[result])

        inspection.status = RESULT_STATUS[result]
        inspection.overall_result = result
        inspection.completed_at = _now()
        apply_changes(inspection, dump(payload, exclude_unset=True, exclude=("result",)))
        await self.commit()
        await self.session.refresh(inspection)
        logger.info("Completed inspection %s: %s", inspection.inspection_number, result)
        return inspection

    # PUBLIC_INTERFACE
    async def save_checkpoints(self, inspection_id: UUID, items: List[InspectionCheckpointIn]) -> Inspection:
        """Update checkpoints given with an id and append the rest."""
        inspection = await self.get_inspection(inspection_id)
        if inspection.status in COMPLETED_INSPECTION_STATUSES:
            raise BusinessRuleError("Cannot change checkpoints of a completed inspection")

        checkpoints = self.repo(InspectionCheckpointRepository)
        next_index = len(inspection.checkpoints)
        for item in items:
            if item.id is not None:
                existing = self.require(
                    await checkpoints.get_for_inspection(inspection.id, item.id), "Inspection checkpoint", item.id
                )
                changes = dump(item, exclude_unset=True, exclude=("id",))
                apply_changes(existing, changes, skip=[k for k in ("name", "evaluation_type", "order_index") if changes.get(k, "") is None])
            else:
                inspection.checkpoints.append(self._checkpoint(item, next_index))
                next_index += 1
        await self.commit()
        await self.session.refresh(inspection)
        logger.info("Saved %d checkpoints on inspection %s", len(items), inspection.inspection_number)
        return inspection

    async def delete_inspection(self, inspection_id: UUID) -> None:
        inspection = await self.get_inspection(inspection_id)
        inspection.is_active = False
        await self.commit()
        logger.info("Deactivated inspection %s", inspection.inspection_number)

    async def inspection_metrics(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> InspectionMetrics:
        rows = await self.inspections.list_inspections(start=start, end=end, limit=None)
        return summarize_inspections(rows)

    # Checkpoints

    async def list_checkpoints(self, **filters) -> List[QualityCheckpoint]:
        return await self.checkpoints.list_checkpoints(**filters)

    async def get_checkpoint(self, checkpoint_id: UUID) -> QualityCheckpoint:
        return self.require(await self.checkpoints.get_active(checkpoint_id), "Quality checkpoint", checkpoint_id)

    async def create_checkpoint(self, payload: QualityCheckpointCreate) -> QualityCheckpoint:
        await self._check_refs(location_id=payload.location_id, product_id=payload.product_id, order_id=payload.order_id)
        code = await self.next_code(self.checkpoints, QualityCheckpoint.checkpoint_code, *CHECKPOINT_CODE)
        checkpoint = await self.checkpoints.create(QualityCheckpoint(checkpoint_code=code, is_active=True, **dump(payload)))
        await self.commit()
        await self.session.refresh(checkpoint)
        logger.info("Created quality checkpoint %s (%s)", code, checkpoint.checkpoint_type)
        return checkpoint

    async def update_checkpoint(self, checkpoint_id: UUID, payload: QualityCheckpointUpdate) -> QualityCheckpoint:
        checkpoint = await self.get_checkpoint(checkpoint_id)
        changes = dump(payload, exclude_unset=True)
        required = ("checkpoint_type", "checkpoint_name", "inspector_name", "inspection_date", "status")
        apply_changes(checkpoint, changes, skip=[k for k in required if changes.get(k, "") is None])
        await self.commit()
        await self.session.refresh(checkpoint)
        logger.info("Updated quality checkpoint %s", checkpoint.checkpoint_code)
        return checkpoint

    async def delete_checkpoint(self, checkpoint_id: UUID) -> None:
        checkpoint = await self.get_checkpoint(checkpoint_id)
        checkpoint.is_active = False
        await self.commit()
        logger.info("Deactivated quality checkpoint %s", checkpoint.checkpoint_code)

    # Defects

    async def list_defects(self, **filters) -> List[QualityDefect]:
        return await self.defects.list_defects(**filters)

    # PUBLIC_INTERFACE
    async def record_defect(self, payload: DefectCreate) -> QualityDefect:
        await self.get_checkpoint(payload.checkpoint_id)
        await self._check_refs(product_id=payload.product_id)
        code = await self.next_code(self.defects, QualityDefect.defect_code, *DEFECT_CODE)
        defect = await self.defects.create(QualityDefect(defect_code=code, resolution_status="OPEN", **dump(payload)))
        await self.commit()
        await self.session.refresh(defect)
        logger.info("Recorded defect %s (%s, %s)", code, defect.defect_category, defect.severity)
        return defect

    # PUBLIC_INTERFACE
    async def resolve_defect(self, defect_id: UUID, payload: DefectResolve) -> QualityDefect:
        defect = self.require(await self.defects.get(defect_id), "Defect", defect_id)
        if defect.resolution_status == "RESOLVED":
            raise BusinessRuleError(f"Defect {defect.defect_code} is already resolved")
        defect.resolution_status = "RESOLVED"
        defect.resolution_notes = payload.resolution_notes
        defect.resolved_by = payload.resolved_by
        defect.resolved_at = _now()
        await self.commit()
        await self.session.refresh(defect)
        logger.info("Resolved defect %s", defect.defect_code)
        return defect

    async def defect_breakdown(self) -> DefectBreakdown:
        rows = await self.defects.list_defects(limit=None)
        return DefectBreakdown(
            by_category=dict(Counter(d.defect_category for d in rows)),
            by_severity=dict(Counter(d.severity for d in rows)),
        )

    # Metrics

    async def list_metrics(self, checkpoint_id: UUID) -> List[QualityMetric]:
        await self.get_checkpoint(checkpoint_id)
        return await self.metrics.list_for_checkpoint(checkpoint_id)

    # PUBLIC_INTERFACE
    async def record_metric(self, payload: QualityMetricCreate) -> QualityMetric:
        """Store a measurement; is_within_range is derived from the thresholds."""
        await self.get_checkpoint(payload.checkpoint_id)
        code = await self.next_code(self.metrics, QualityMetric.metric_code, *METRIC_CODE)
        metric = await self.metrics.create(
            QualityMetric(
                metric_code=code,
                is_within_range=within_range(payload.metric_value, payload.min_threshold, payload.max_threshold),
                **dump(payload),
            )
        )
        await self.commit()
        await self.session.refresh(metric)
        logger.info("Recorded metric %s %s=%s (in range: %s)", code, metric.metric_name, metric.metric_value, metric.is_within_range)
        return metric

    # Compliance

    async def list_compliance(self, **filters) -> List[ComplianceReport]:
        return await self.compliance.list_reports(**filters)

    async def get_compliance(self, report_id: UUID) -> ComplianceReport:
        return self.require(await self.compliance.get_active(report_id), "Compliance report", report_id)

    async def create_compliance(self, payload: ComplianceCreate) -> ComplianceReport:
        code = await self.next_code(self.compliance, ComplianceReport.report_code, *COMPLIANCE_CODE)
        report = await self.compliance.create(ComplianceReport(report_code=code, is_active=True, **dump(payload)))
        await self.commit()
        await self.session.refresh(report)
        logger.info("Created compliance report %s (%s, %s)", code, report.report_type, report.status)
        return report

    async def update_compliance(self, report_id: UUID, payload: ComplianceUpdate) -> ComplianceReport:
        report = await self.get_compliance(report_id)
        changes = dump(payload, exclude_unset=True)
        required = ("report_type", "report_date", "auditor_name", "status")
        apply_changes(report, changes, skip=[k for k in required if changes.get(k, "") is None])
        await self.commit()
        await self.session.refresh(report)
        logger.info("Updated compliance report %s", report.report_code)
        return report

    async def delete_compliance(self, report_id: UUID) -> None:
        report = await self.get_compliance(report_id)
        report.is_active = False
        await self.commit()
        logger.info("Deactivated compliance report %s", report.report_code)
