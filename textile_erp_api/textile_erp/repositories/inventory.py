from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, or_

from textile_erp.db.models.catalog import Product
from textile_erp.db.models.inventory import (
    LocationInventory,
    StockAlert,
    StockMovement,
    StockReservation,
)
from .base import TenantRepository


class LocationInventoryRepository(TenantRepository[LocationInventory]):
    """Per-location stock levels."""

    model = LocationInventory

    async def list_inventory(
        self,
        *,
        location_id: Optional[UUID] = None,
        product_id: Optional[UUID] = None,
        low_stock: bool = False,
        out_of_stock: bool = False,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[LocationInventory]:
        stmt = self.scoped().join(
            Product, (Product.id == LocationInventory.product_id) & (Product.company_id == self.company_id)
        )
        if location_id:
            stmt = stmt.where(LocationInventory.location_id == location_id)
        if product_id:
            stmt = stmt.where(LocationInventory.product_id == product_id)
        if low_stock:
            # same threshold the alerts use: the row's level, else the product's
            threshold = func.coalesce(LocationInventory.reorder_level, Product.reorder_level)
            stmt = stmt.where(threshold.is_not(None), LocationInventory.stock_quantity <= threshold)
        if out_of_stock:
            stmt = stmt.where(LocationInventory.stock_quantity <= 0)
        if search:
            like = f"%{search}%"
            stmt = stmt.where(
                or_(Product.name.ilike(like), Product.product_code.ilike(like), Product.sku.ilike(like))
            )
        stmt = stmt.order_by(Product.name).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res.unique())

    async def get_for(self, product_id: UUID, location_id: UUID) -> Optional[LocationInventory]:
        stmt = self.scoped().where(
            LocationInventory.product_id == product_id,
            LocationInventory.location_id == location_id,
        )
        return await self.scalar_one_or_none(stmt)


class StockMovementRepository(TenantRepository[StockMovement]):
    model = StockMovement

    async def list_movements(
        self,
        *,
        product_id: Optional[UUID] = None,
        location_id: Optional[UUID] = None,
        movement_type: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[StockMovement]:
        criteria = []
        if product_id:
            criteria.append(StockMovement.product_id == product_id)
        if location_id:
            criteria.append(
                or_(StockMovement.from_location_id == location_id, StockMovement.to_location_id == location_id)
            )
        if movement_type:
            criteria.append(StockMovement.movement_type == movement_type)
        return await self.list_where(
            *criteria, order_by=StockMovement.created_at.desc(), limit=limit, offset=offset
        )


class ReservationRepository(TenantRepository[StockReservation]):
    model = StockReservation

    async def list_reservations(
        self, *, status: Optional[str] = None, product_id: Optional[UUID] = None, limit: int = 100, offset: int = 0
    ) -> List[StockReservation]:
        criteria = []
        if status:
            criteria.append(StockReservation.status == status)
        if product_id:
            criteria.append(StockReservation.product_id == product_id)
        return await self.list_where(
            *criteria, order_by=StockReservation.created_at.desc(), limit=limit, offset=offset
        )

    async def count_active_for(self, product_id: UUID, location_id: UUID) -> int:
        return await self.count_where(
            StockReservation.product_id == product_id,
            StockReservation.location_id == location_id,
            StockReservation.status == "ACTIVE",
        )


class StockAlertRepository(TenantRepository[StockAlert]):
    model = StockAlert

    async def list_alerts(self, *, status: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[StockAlert]:
        criteria = [StockAlert.status == status] if status else []
        return await self.list_where(*criteria, order_by=StockAlert.created_at.desc(), limit=limit, offset=offset)

    async def get_active_for(self, product_id: UUID, location_id: UUID) -> Optional[StockAlert]:
        stmt = self.scoped().where(
            StockAlert.product_id == product_id,
            StockAlert.location_id == location_id,
            StockAlert.status == "ACTIVE",
        ).limit(1)
        return await self.scalar_one_or_none(stmt)
