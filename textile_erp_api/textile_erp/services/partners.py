from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from textile_erp.db.models.procurement import Supplier
from textile_erp.db.models.sales import Customer
from textile_erp.repositories.procurement import SupplierRepository
from textile_erp.repositories.sales import CustomerRepository
from textile_erp.schemas.partners import CustomerCreate, CustomerUpdate, SupplierCreate, SupplierUpdate
from textile_erp.services.base import TenantService, apply_changes, dump
from textile_erp.services.codes import CUSTOMER_CODE, SUPPLIER_CODE

logger = logging.getLogger(__name__)


class CustomerService(TenantService):
    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.customers: CustomerRepository = self.repo(CustomerRepository)

    async def list_customers(self, **filters) -> List[Customer]:
        return await self.customers.list_customers(**filters)

    async def get_customer(self, customer_id: UUID) -> Customer:
        return self.require(await self.customers.get(customer_id), "Customer", customer_id)

    async def create_customer(self, payload: CustomerCreate) -> Customer:
        code = await self.next_code(self.customers, Customer.code, *CUSTOMER_CODE)
        customer = await self.customers.create(Customer(code=code, is_active=True, **dump(payload)))
        await self.commit()
        await self.session.refresh(customer)
        logger.info("Created customer %s (%s)", customer.code, customer.name)
        return customer

    async def update_customer(self, customer_id: UUID, payload: CustomerUpdate) -> Customer:
        customer = await self.get_customer(customer_id)
        apply_changes(customer, dump(payload, exclude_unset=True))
        await self.commit()
        await self.session.refresh(customer)
        logger.info("Updated customer %s", customer.code)
        return customer

    async def delete_customer(self, customer_id: UUID) -> None:
        customer = await self.get_customer(customer_id)
        customer.is_active = False
        await self.commit()
        logger.info("Deactivated customer %s", customer.code)


class SupplierService(TenantService):
    def __init__(self, session, ctx) -> None:
        super().__init__(session, ctx)
        self.suppliers: SupplierRepository = self.repo(SupplierRepository)

    async def list_suppliers(self, **filters) -> List[Supplier]:
        return await self.suppliers.list_suppliers(**filters)

    async def get_supplier(self, supplier_id: UUID) -> Supplier:
        return self.require(await self.suppliers.get(supplier_id), "Supplier", supplier_id)

    async def create_supplier(self, payload: SupplierCreate) -> Supplier:
        code = await self.next_code(self.suppliers, Supplier.code, *SUPPLIER_CODE)
        supplier = await self.suppliers.create(Supplier(code=code, is_active=True, **dump(payload)))
        await self.commit()
        await self.session.refresh(supplier)
        logger.info("Created supplier %s (%s)", supplier.code, supplier.name)
        return supplier

    async def update_supplier(self, supplier_id: UUID, payload: SupplierUpdate) -> Supplier:
        supplier = await self.get_supplier(supplier_id)
        apply_changes(supplier, dump(payload, exclude_unset=True))
        await self.commit()
        await self.session.refresh(supplier)
        logger.info("Updated supplier %s", supplier.code)
        return supplier

    async def delete_supplier(self, supplier_id: UUID) -> None:
        supplier = await self.get_supplier(supplier_id)
        supplier.is_active = False
        await self.commit()
        logger.info("Deactivated supplier %s", supplier.code)
