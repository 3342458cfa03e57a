"""Enumerations shared by models, services and API schemas (stored as text columns)."""

from __future__ import annotations

from enum import Enum


class CompanyRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class LocationType(str, Enum):
    BRANCH = "BRANCH"
    WAREHOUSE = "WAREHOUSE"
    FACTORY = "FACTORY"
    STORE = "STORE"


class ProductType(str, Enum):
    OWN_MANUFACTURE = "OWN_MANUFACTURE"
    VENDOR_SUPPLIED = "VENDOR_SUPPLIED"
    OUTSOURCED = "OUTSOURCED"
    RAW_MATERIAL = "RAW_MATERIAL"
    FINISHED_GOODS = "FINISHED_GOODS"
    SEMI_FINISHED = "SEMI_FINISHED"


class StockAdjustmentType(str, Enum):
    ADD = "ADD"
    PURCHASE = "PURCHASE"
    RETURN = "RETURN"
    REMOVE = "REMOVE"
    SALE = "SALE"
    DAMAGE = "DAMAGE"
    TRANSFER = "TRANSFER"
    SET = "SET"


class StockMovementType(str, Enum):
    PURCHASE = "PURCHASE"
    SALE = "SALE"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"
    ADJUSTMENT_IN = "ADJUSTMENT_IN"
    ADJUSTMENT_OUT = "ADJUSTMENT_OUT"
    PRODUCTION_IN = "PRODUCTION_IN"
    PRODUCTION_OUT = "PRODUCTION_OUT"
    RETURN_IN = "RETURN_IN"
    RETURN_OUT = "RETURN_OUT"
    DAMAGE = "DAMAGE"


class ReservationType(str, Enum):
    ORDER = "ORDER"
    PRODUCTION = "PRODUCTION"
    TRANSFER = "TRANSFER"
    MANUAL = "MANUAL"


class ReservationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    RELEASED = "RELEASED"


class AlertType(str, Enum):
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


class AlertStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ACKNOWLEDGED = "ACKNOWLEDGED"


class OrderStatus(str, Enum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    IN_PRODUCTION = "IN_PRODUCTION"
    READY_TO_SHIP = "READY_TO_SHIP"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class OrderPriority(str, Enum):
    URGENT = "URGENT"
    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"


class PurchaseOrderStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    CONFIRMED = "CONFIRMED"
    PARTIALLY_RECEIVED = "PARTIALLY_RECEIVED"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"


class MachineStatus(str, Enum):
    NEW = "NEW"
    IN_USE = "IN_USE"
    UNDER_MAINTENANCE = "UNDER_MAINTENANCE"
    UNDER_REPAIR = "UNDER_REPAIR"
    IDLE = "IDLE"
    DECOMMISSIONED = "DECOMMISSIONED"


class OperationalStatus(str, Enum):
    FREE = "FREE"
    BUSY = "BUSY"
    RESERVED = "RESERVED"
    UNAVAILABLE = "UNAVAILABLE"


class BreakdownSeverity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class BreakdownPriority(str, Enum):
    URGENT = "URGENT"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class BreakdownStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class MaintenanceType(str, Enum):
    DAILY_CHECK = "DAILY_CHECK"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"
    EMERGENCY = "EMERGENCY"


class InspectionType(str, Enum):
    INCOMING_MATERIAL = "INCOMING_MATERIAL"
    IN_PROCESS = "IN_PROCESS"
    FINAL_PRODUCT = "FINAL_PRODUCT"
    RANDOM_CHECK = "RANDOM_CHECK"


class InspectionReferenceType(str, Enum):
    PRODUCT = "PRODUCT"
    ORDER = "ORDER"
    BATCH = "BATCH"


class InspectionStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    PASSED = "PASSED"
    FAILED = "FAILED"
    CONDITIONAL = "CONDITIONAL"


class InspectionResult(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    CONDITIONAL = "CONDITIONAL"


class EvaluationType(str, Enum):
    PASS_FAIL = "PASS_FAIL"
    RATING = "RATING"
    MEASUREMENT = "MEASUREMENT"


class CheckpointType(str, Enum):
    INCOMING_MATERIAL = "INCOMING_MATERIAL"
    IN_PROCESS = "IN_PROCESS"
    FINAL_INSPECTION = "FINAL_INSPECTION"
    PACKAGING = "PACKAGING"
    RANDOM_SAMPLING = "RANDOM_SAMPLING"
    BATCH_TEST = "BATCH_TEST"


class CheckpointStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    PASSED = "PASSED"
    FAILED = "FAILED"
    REWORK_REQUIRED = "REWORK_REQUIRED"


class DefectCategory(str, Enum):
    FABRIC = "FABRIC"
    STITCHING = "STITCHING"
    COLOR = "COLOR"
    MEASUREMENT = "MEASUREMENT"
    PACKAGING = "PACKAGING"
    FINISHING = "FINISHING"
    LABELING = "LABELING"


class DefectSeverity(str, Enum):
    CRITICAL = "CRITICAL"
    MAJOR = "MAJOR"
    MINOR = "MINOR"
    COSMETIC = "COSMETIC"


class DefectResolutionStatus(str, Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


class ComplianceType(str, Enum):
    ISO_9001 = "ISO_9001"
    OEKO_TEX = "OEKO_TEX"
    GOTS = "GOTS"
    WRAP = "WRAP"
    SA8000 = "SA8000"
    BSCI = "BSCI"
    SEDEX = "SEDEX"


class ComplianceStatus(str, Enum):
    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"
    PENDING_REVIEW = "PENDING_REVIEW"
    EXPIRED = "EXPIRED"


class InvoiceStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class BillStatus(str, Enum):
    DRAFT = "DRAFT"
    RECEIVED = "RECEIVED"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class PaymentTerms(str, Enum):
    IMMEDIATE = "IMMEDIATE"
    NET_15 = "NET_15"
    NET_30 = "NET_30"
    NET_60 = "NET_60"
    NET_90 = "NET_90"
    ADVANCE = "ADVANCE"
    COD = "COD"
    CREDIT = "CREDIT"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CHEQUE = "CHEQUE"
    BANK_TRANSFER = "BANK_TRANSFER"
    UPI = "UPI"
    CARD = "CARD"
    OTHER = "OTHER"


class PaymentReferenceType(str, Enum):
    INVOICE = "INVOICE"
    BILL = "BILL"


class PaymentStatus(str, Enum):
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

