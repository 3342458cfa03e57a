from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_

from textile_erp.db.models.sales import Customer, Order
from .base import TenantRepository


class CustomerRepository(TenantRepository[Customer]):
    model = Customer

    async def list_customers(
        self, *, search: Optional[str] = None, is_active: Optional[bool] = None, limit: int = 100, offset: int = 0
    ) -> List[Customer]:
        criteria = []
        if is_active is not None:
            criteria.append(Customer.is_active.is_(is_active))
        if search:
            like = f"%{search}%"
            criteria.append(or_(Customer.code.ilike(like), Customer.name.ilike(like), Customer.email.ilike(like)))
        return await self.list_where(*criteria, order_by=Customer.code, limit=limit, offset=offset)


class OrderRepository(TenantRepository[Order]):
    """Sales orders; items are loaded with the header (selectin)."""

    model = Order

    async def get_by_code(self, order_code: str) -> Optional[Order]:
        stmt = self.scoped().where(Order.order_code == order_code, Order.is_active.is_(True))
        return await self.scalar_one_or_none(stmt)

    async def list_orders(
        self,
        *,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        customer_id: Optional[UUID] = None,
        customer_name: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Order]:
        criteria = [Order.is_active.is_(True)]
        if status:
            criteria.append(Order.status == status)
        if priority:
            criteria.append(Order.priority == priority)
        if customer_id:
            criteria.append(Order.customer_id == customer_id)
        if customer_name:
            criteria.append(Order.customer_name.ilike(f"%{customer_name}%"))
        if from_date:
            criteria.append(Order.order_date >= from_date)
        if to_date:
            criteria.append(Order.order_date <= to_date)
        return await self.list_where(
            *criteria, order_by=[Order.created_at.desc()], limit=limit, offset=offset
        )
