from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RevenueLine(BaseModel):
    product: str
    amount: float
    percentage: float


class ProfitLossReport(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    revenue: float
    cost_of_goods_sold: float
    gross_profit: float
    operating_expenses: float
    net_profit: float
    profit_margin: float = Field(..., description="Net profit as a percent of revenue")
    revenue_breakdown: List[RevenueLine] = Field(default_factory=list)


class CustomerRevenue(BaseModel):
    customer: str
    invoice_count: int
    revenue: float


class SalesSummaryReport(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    invoice_count: int
    total_revenue: float
    paid_count: int
    paid_amount: float
    outstanding_amount: float
    top_customers: List[CustomerRevenue] = Field(default_factory=list)


class InventoryLine(BaseModel):
    product_code: str
    sku: str
    name: str
    location: Optional[str] = None
    stock_quantity: float
    reorder_level: Optional[float] = None
    cost_price: float
    stock_value: float
    is_low_stock: bool
    is_out_of_stock: bool


class InventorySummaryReport(BaseModel):
    total_products: int
    total_stock_value: float
    low_stock_count: int
    out_of_stock_count: int
    items: List[InventoryLine] = Field(default_factory=list)


class AgingBuckets(BaseModel):
    current: float = 0.0
    days_31_60: float = 0.0
    days_61_90: float = 0.0
    over_90: float = 0.0
    total: float = 0.0


class PartyAging(AgingBuckets):
    party_id: Optional[str] = None
    party_name: Optional[str] = None


class AgingReport(BaseModel):
    as_of: date
    totals: AgingBuckets
    parties: List[PartyAging] = Field(default_factory=list)


class MachineUtilizationLine(BaseModel):
    machine_code: str
    name: str
    machine_type: Optional[str] = None
    status: str
    operational_status: str
    breakdown_count: int
    downtime_hours: float
    maintenance_records: int


class MachineUtilizationReport(BaseModel):
    machines: List[MachineUtilizationLine] = Field(default_factory=list)


class QualityMetricsReport(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_checkpoints: int
    passed: int
    failed: int
    pass_rate: float
    fail_rate: float
    total_defects: int
    defects_by_category: Dict[str, int] = Field(default_factory=dict)
    defects_by_severity: Dict[str, int] = Field(default_factory=dict)


class MovementLine(BaseModel):
    movement_code: str
    created_at: str
    product: str
    movement_type: str
    quantity: float
    unit_cost: Optional[float] = None
    total_cost: Optional[float] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None


class MovementTypeTotal(BaseModel):
    movement_type: str
    movements: int
    quantity: float
    total_cost: float


class InventoryMovementsReport(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    movements: List[MovementLine] = Field(default_factory=list)
    totals_by_type: List[MovementTypeTotal] = Field(default_factory=list)
