from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from textile_erp.core.errors import BusinessRuleError
from textile_erp.db.models.catalog import Product
from textile_erp.db.models.inventory import LocationInventory, StockAlert, StockMovement, StockReservation
from textile_erp.repositories.catalog import ProductRepository
from textile_erp.repositories.inventory import (
    LocationInventoryRepository,
    ReservationRepository,
    StockAlertRepository,
    StockMovementRepository,
)
from textile_erp.repositories.locations import LocationRepository
from textile_erp.schemas.inventory import LocationInventoryUpsert, ReservationCreate, StockMovementCreate
from textile_erp.services.base import TenantService
from textile_erp.services.codes import ALERT_CODE, MOVEMENT_CODE, RESERVATION_CODE
from textile_erp.services.pricing import money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

INBOUND_MOVEMENTS = frozenset({"PURCHASE", "TRANSFER_IN", "ADJUSTMENT_IN", "PRODUCTION_IN", "RETURN_IN"})
OUTBOUND_MOVEMENTS = frozenset(
    {"SALE", "TRANSFER_OUT", "ADJUSTMENT_OUT", "PRODUCTION_OUT", "RETURN_OUT", "DAMAGE"}
)
TRANSFER_MOVEMENTS = frozenset({"TRANSFER_IN", "TRANSFER_OUT"})


@dataclass(frozen=True)
class MovementEffect:
    """Which location rows a movement touches and how the product total changes."""
    take_from: bool
    put_to: bool
    aggregate_sign: int


# PUBLIC_INTERFACE
def movement_effect(movement_type: str, from_location_id: Optional[UUID], to_location_id: Optional[UUID]) -> MovementEffect:
    """
    Resolve a movement into stock effects.

    Transfers naming both locations move stock between them and leave the
    product total unchanged; other inbound types add at the destination and
    outbound types remove at the source.
    """
    if movement_type in TRANSFER_MOVEMENTS and from_location_id and to_location_id:
        if from_location_id == to_location_id:
            raise BusinessRuleError("Transfer source and destination must differ")
        return MovementEffect(take_from=True, put_to=True, aggregate_sign=0)
    if movement_type in INBOUND_MOVEMENTS:
        if not to_location_id:
            raise BusinessRuleError(f"{movement_type} requires to_location_id")
        return MovementEffect(take_from=False, put_to=True, aggregate_sign=1)
    if movement_type in OUTBOUND_MOVEMENTS:
        if not from_location_id:
            raise BusinessRuleError(f"{movement_type} requires from_location_id")
        return MovementEffect(take_from=True, put_to=False, aggregate_sign=-1)
    raise BusinessRuleError(f"Unknown movement type {movement_type}")


# PUBLIC_INTERFACE
def alert_type_for(stock: Decimal, reorder_level: Optional[Decimal]) -> Optional[str]:
    """OUT_OF_STOCK at or below zero, LOW_STOCK at or below the reorder level, else None."""
    if reorder_level is None:
        return None
    stock = Decimal(str(stock or 0))
    if stock > Decimal(str(reorder_level)):
        return None
    return "OUT_OF_STOCK" if stock <= 0 else "LOW_STOCK"


def _available(row: LocationInventory) -> Decimal:
    return (row.stock_quantity or ZERO) - (row.reserved_quantity or ZERO)


class InventoryService(TenantService):
    """
    Location stock, movements, reservations and alerts.

    Every stock change re-evaluates the (product, location) alert before the
    single commit of the operation.
    """

    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.stock: LocationInventoryRepository = self.repo(LocationInventoryRepository)
        self.movements: StockMovementRepository = self.repo(StockMovementRepository)
        self.reservations: ReservationRepository = self.repo(ReservationRepository)
        self.alerts: StockAlertRepository = self.repo(StockAlertRepository)
        self.products: ProductRepository = self.repo(ProductRepository)
        self.locations: LocationRepository = self.repo(LocationRepository)

    async def _product(self, product_id: UUID) -> Product:
        return self.require(await self.products.get_active(product_id), "Product", product_id)

    async def _location(self, location_id: UUID) -> None:
        self.require(await self.locations.get_active(location_id), "Location", location_id)

    async def _row(self, product_id: UUID, location_id: UUID, *, create: bool) -> Optional[LocationInventory]:
        row = await self.stock.get_for(product_id, location_id)
        if row is None and create:
            row = await self.stock.create(
                LocationInventory(
                    product_id=product_id,
                    location_id=location_id,
                    stock_quantity=ZERO,
                    reserved_quantity=ZERO,
                    updated_by=self.ctx.user_id,
                )
            )
        return row

    async def _sync_alert(self, row: LocationInventory, product: Product) -> None:
        reorder_level = row.reorder_level if row.reorder_level is not None else product.reorder_level
        alert_type = alert_type_for(row.stock_quantity, reorder_level)
        if alert_type is None:
            return
        message = (
            f"{product.name} is out of stock" if alert_type == "OUT_OF_STOCK"
            else f"{product.name} is below its reorder level ({reorder_level})"
        )
        active = await self.alerts.get_active_for(row.product_id, row.location_id)
        if active is not None:
            active.alert_type = alert_type
            active.current_stock = row.stock_quantity
            active.threshold_value = reorder_level
            active.message = message
            return
        code = await self.next_code(self.alerts, StockAlert.alert_code, *ALERT_CODE)
        await self.alerts.create(
            StockAlert(
                alert_code=code,
                product_id=row.product_id,
                location_id=row.location_id,
                alert_type=alert_type,
                current_stock=row.stock_quantity,
                threshold_value=reorder_level,
                status="ACTIVE",
                message=message,
            )
        )
        logger.info("Raised stock alert %s (%s) for %s", code, alert_type, product.product_code)

    # Location inventory

    async def list_inventory(self, **filters) -> List[LocationInventory]:
        return await self.stock.list_inventory(**filters)

    # PUBLIC_INTERFACE
    async def upsert_stock(self, payload: LocationInventoryUpsert) -> LocationInventory:
        """Set the stock level of a product at a location; the product total follows the difference."""
        product = await self._product(payload.product_id)
        await self._location(payload.location_id)
        row = await self._row(payload.product_id, payload.location_id, create=True)

        if payload.stock_quantity < (row.reserved_quantity or ZERO):
            raise BusinessRuleError("Stock cannot be set below the reserved quantity")
        delta = payload.stock_quantity - (row.stock_quantity or ZERO)
        row.stock_quantity = payload.stock_quantity
        if payload.reorder_level is not None:
            row.reorder_level = payload.reorder_level
        if payload.max_stock_level is not None:
            row.max_stock_level = payload.max_stock_level
        row.updated_by = self.ctx.user_id
        product.stock_quantity = max(ZERO, (product.stock_quantity or ZERO) + delta)

        await self.session.flush()
        await self._sync_alert(row, product)
        await self.commit()
        await self.session.refresh(row)
        logger.info("Set stock of %s at %s to %s", product.product_code, payload.location_id, row.stock_quantity)
        return row

    async def delete_stock_row(self, row_id: UUID) -> None:
        """Remove a location row; the stock it held leaves the product total too."""
        row = self.require(await self.stock.get(row_id), "Inventory record", row_id)
        if await self.reservations.count_active_for(row.product_id, row.location_id):
            raise BusinessRuleError("Cannot delete inventory with active reservations")
        held = row.stock_quantity or ZERO
        product = await self.products.get(row.product_id)
        if product is not None and held:
            product.stock_quantity = max(ZERO, (product.stock_quantity or ZERO) - held)
        await self.stock.delete_by_id(row_id)
        await self.commit()
        logger.info("Deleted inventory row %s holding %s", row_id, held)

    # Movements

    async def list_movements(self, **filters) -> List[StockMovement]:
        return await self.movements.list_movements(**filters)

    # PUBLIC_INTERFACE
    async def record_movement(self, payload: StockMovementCreate) -> StockMovement:
        """
        Record a stock movement and apply it to location stock.

        Raises:
            BusinessRuleError: outbound quantity exceeds what is available at the source.
        """
        movement_type = payload.movement_type.value
        effect = movement_effect(movement_type, payload.from_location_id, payload.to_location_id)
        product = await self._product(payload.product_id)
        quantity = payload.quantity

        touched: List[LocationInventory] = []
        if effect.take_from:
            await self._location(payload.from_location_id)
            source = await self._row(product.id, payload.from_location_id, create=False)
            if source is None or _available(source) < quantity:
                raise BusinessRuleError("Insufficient available stock at the source location")
            source.stock_quantity = source.stock_quantity - quantity
            source.updated_by = self.ctx.user_id
            touched.append(source)
        if effect.put_to:
            await self._location(payload.to_location_id)
            target = await self._row(product.id, payload.to_location_id, create=True)
            target.stock_quantity = (target.stock_quantity or ZERO) + quantity
            target.updated_by = self.ctx.user_id
            touched.append(target)
        if effect.aggregate_sign:
            product.stock_quantity = max(ZERO, (product.stock_quantity or ZERO) + effect.aggregate_sign * quantity)

        code = await self.next_code(self.movements, StockMovement.movement_code, *MOVEMENT_CODE)
        movement = await self.movements.create(
            StockMovement(
                movement_code=code,
                product_id=product.id,
                from_location_id=payload.from_location_id if effect.take_from else None,
                to_location_id=payload.to_location_id if effect.put_to else None,
                movement_type=movement_type,
                quantity=quantity,
                unit_cost=payload.unit_cost,
                total_cost=money(quantity * payload.unit_cost) if payload.unit_cost is not None else None,
                reference_type=payload.reference_type,
                reference_id=payload.reference_id,
                notes=payload.notes,
                created_by=self.ctx.user_id,
            )
        )
        for row in touched:
            await self._sync_alert(row, product)
        await self.commit()
        await self.session.refresh(movement)
        logger.info("Stock movement %s: %s %s of %s", code, movement_type, quantity, product.product_code)
        return movement

    # Reservations

    async def list_reservations(self, **filters) -> List[StockReservation]:
        return await self.reservations.list_reservations(**filters)

    # PUBLIC_INTERFACE
    async def reserve(self, payload: ReservationCreate) -> StockReservation:
        """Hold back available stock at a location."""
        product = await self._product(payload.product_id)
        await self._location(payload.location_id)
        row = await self._row(product.id, payload.location_id, create=False)
        if row is None or _available(row) < payload.quantity:
            raise BusinessRuleError("Insufficient available stock to reserve")

        row.reserved_quantity = (row.reserved_quantity or ZERO) + payload.quantity
        code = await self.next_code(self.reservations, StockReservation.reservation_code, *RESERVATION_CODE)
        reservation = await self.reservations.create(
            StockReservation(
                reservation_code=code,
                product_id=product.id,
                location_id=payload.location_id,
                order_id=payload.order_id,
                reserved_quantity=payload.quantity,
                reservation_type=payload.reservation_type.value,
                status="ACTIVE",
                expires_at=payload.expires_at,
                notes=payload.notes,
                created_by=self.ctx.user_id,
            )
        )
        await self.commit()
        await self.session.refresh(reservation)
        logger.info("Reserved %s of %s (%s)", payload.quantity, product.product_code, code)
        return reservation

    # PUBLIC_INTERFACE
    async def release(self, reservation_id: UUID) -> StockReservation:
        reservation = self.require(await self.reservations.get(reservation_id), "Reservation", reservation_id)
        if reservation.status != "ACTIVE":
            raise BusinessRuleError("Reservation is already released")
        row = await self._row(reservation.product_id, reservation.location_id, create=False)
        if row is not None:
            row.reserved_quantity = max(ZERO, (row.reserved_quantity or ZERO) - reservation.reserved_quantity)
        reservation.status = "RELEASED"
        await self.commit()
        await self.session.refresh(reservation)
        logger.info("Released reservation %s", reservation.reservation_code)
        return reservation

    # Alerts

    async def list_alerts(self, **filters) -> List[StockAlert]:
        return await self.alerts.list_alerts(**filters)

    async def acknowledge_alert(self, alert_id: UUID) -> StockAlert:
        alert = self.require(await self.alerts.get(alert_id), "Stock alert", alert_id)
        alert.status = "ACKNOWLEDGED"
        alert.acknowledged_by = self.ctx.user_id
        alert.acknowledged_at = datetime.now(tz=timezone.utc)
        await self.commit()
        await self.session.refresh(alert)
        logger.info("Acknowledged stock alert %s", alert.alert_code)
        return alert
