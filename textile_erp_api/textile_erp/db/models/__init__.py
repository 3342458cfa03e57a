"""
ORM models for the textile ERP: tenancy, locations, catalog, inventory, sales,
procurement, maintenance, quality and finance.

Importing this package registers every mapped class with the Base metadata for
Alembic and runtime usage.
"""

from .company import (  # noqa: F401
    Company,
    User,
    UserCompany,
    AuditLog,
)
from .location import Location  # noqa: F401
from .catalog import (  # noqa: F401
    ProductCategory,
    Product,
    StockAdjustment,
)
from .sales import (  # noqa: F401
    Customer,
    Order,
    OrderItem,
)
from .procurement import (  # noqa: F401
    Supplier,
    PurchaseOrder,
    PurchaseOrderItem,
)
from .inventory import (  # noqa: F401
    LocationInventory,
    StockMovement,
    StockReservation,
    StockAlert,
)
from .maintenance import (  # noqa: F401
    Machine,
    MachineStatusHistory,
    BreakdownReport,
    MaintenanceSchedule,
    MaintenanceRecord,
)
from .quality import (  # noqa: F401
    Inspection,
    InspectionCheckpoint,
    QualityCheckpoint,
    QualityDefect,
    QualityMetric,
    ComplianceReport,
)
from .finance import (  # noqa: F401
    Invoice,
    InvoiceItem,
    Bill,
    BillItem,
    Payment,
)

# Tables whose rows belong to a single company and are protected by RLS.
TENANT_TABLES = [
    "audit_log",
    "locations",
    "product_categories",
    "products",
    "stock_adjustments",
    "customers",
    "suppliers",
    "purchase_orders",
    "purchase_order_items",
    "orders",
    "order_items",
    "location_inventory",
    "stock_movements",
    "stock_reservations",
    "stock_alerts",
    "machines",
    "machine_status_history",
    "breakdown_reports",
    "maintenance_schedules",
    "maintenance_records",
    "inspections",
    "inspection_checkpoints",
    "quality_checkpoints",
    "quality_defects",
    "quality_metrics",
    "compliance_reports",
    "invoices",
    "invoice_items",
    "bills",
    "bill_items",
    "payments",
]
