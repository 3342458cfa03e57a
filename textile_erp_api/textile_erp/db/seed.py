"""
Database seeding for a demo textile company.

Seeds, once per SEED_COMPANY_SLUG:
- Owner account (SEED_OWNER_EMAIL / SEED_OWNER_PASSWORD)
- Company with its headquarters location and a warehouse
- Product categories and sample fabric/garment products
- One customer, one supplier and one machine

Usage:
  python -m textile_erp.db.run_migrations upgrade head
  python -m textile_erp.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from textile_erp.core.deps import TenantContext
from textile_erp.core.security import get_password_hash
from textile_erp.core.settings import get_app_settings
from textile_erp.db.models.company import User
from textile_erp.db.session import get_session_maker, tenant_context
from textile_erp.repositories.companies import CompanyRepository, UserRepository
from textile_erp.schemas.companies import CompanyCreate
from textile_erp.schemas.enums import LocationType, PaymentTerms, ProductType
from textile_erp.schemas.locations import LocationCreate
from textile_erp.schemas.machines import MachineCreate
from textile_erp.schemas.partners import CustomerCreate, SupplierCreate
from textile_erp.schemas.products import CategoryCreate, ProductCreate
from textile_erp.services.companies import CompanyService
from textile_erp.services.locations import LocationService
from textile_erp.services.machines import MachineService
from textile_erp.services.partners import CustomerService, SupplierService
from textile_erp.services.products import ProductService

logger = logging.getLogger(__name__)

CATEGORIES = {
    "Fabrics": "Woven and knitted fabrics",
    "Yarn": "Spun and filament yarn",
    "Garments": "Finished garments",
}

PRODUCTS = [
    ("Cotton Poplin White", "Fabrics", ProductType.OWN_MANUFACTURE, "MTR", "85", "140", {"gsm": Decimal("120"), "color": "White", "material": "Cotton"}),
    ("Combed Cotton Yarn 40s", "Yarn", ProductType.RAW_MATERIAL, "KG", "260", "310", {"material": "Cotton"}),
    ("Polo T-Shirt Navy", "Garments", ProductType.FINISHED_GOODS, "PCS", "180", "399", {"size": "M", "color": "Navy"}),
]


# PUBLIC_INTERFACE
async def seed_all() -> None:
    """Create the demo company and its reference data unless it already exists."""
    settings = get_app_settings()
    async with get_session_maker()() as session:
        if await CompanyRepository(session).get_by_slug(settings.SEED_COMPANY_SLUG):
            logger.info("Seed company %s already present; skipping", settings.SEED_COMPANY_SLUG)
            return

        owner = await _ensure_owner(session, settings.SEED_OWNER_EMAIL, settings.SEED_OWNER_PASSWORD)
        name = settings.SEED_COMPANY_SLUG.replace("-", " ").title()
        membership = await CompanyService(session, owner).create_company(
            CompanyCreate(name=name, country="India", currency=settings.DEFAULT_CURRENCY)
        )
        company_id = membership.company.id
        ctx = TenantContext(company_id=company_id, user_id=owner.id, role="OWNER")

        async with tenant_context(session, company_id):
            await _seed_locations(session, ctx)
            await _seed_catalog(session, ctx)
            await _seed_partners(session, ctx)
            await MachineService(session, ctx).create_machine(
                MachineCreate(name="Air Jet Loom 1", machine_type="LOOM", manufacturer="Toyota")
            )
        logger.info("Seeded company %s (%s)", name, company_id)


async def _ensure_owner(session: AsyncSession, email: str, password: str) -> User:
    users = UserRepository(session)
    user = await users.get_user_by_email(email)
    if user is None:
        user = await users.create_user(
            email=email, full_name="Demo Owner", hashed_password=get_password_hash(password)
        )
        await session.commit()
        logger.info("Created seed owner %s", email)
    return user


async def _seed_locations(session: AsyncSession, ctx: TenantContext) -> None:
    await LocationService(session, ctx).create_location(
        LocationCreate(name="Main Warehouse", type=LocationType.WAREHOUSE, city="Tiruppur", country="India")
    )


async def _seed_catalog(session: AsyncSession, ctx: TenantContext) -> None:
    service = ProductService(session, ctx)
    category_ids: dict[str, UUID] = {}
    for name, description in CATEGORIES.items():
        category = await service.create_category(CategoryCreate(name=name, description=description))
        category_ids[name] = category.id

    for name, category, product_type, uom, cost, price, attrs in PRODUCTS:
        await service.create_product(
            ProductCreate(
                name=name,
                category_id=category_ids[category],
                product_type=product_type,
                unit_of_measure=uom,
                cost_price=Decimal(cost),
                selling_price=Decimal(price),
                reorder_level=Decimal("50"),
                **attrs,
            )
        )


async def _seed_partners(session: AsyncSession, ctx: TenantContext) -> None:
    await CustomerService(session, ctx).create_customer(
        CustomerCreate(
            name="Lotus Retail",
            customer_type="WHOLESALE",
            email="orders@lotus-retail.example",
            payment_terms=PaymentTerms.NET_30,
            city="Chennai",
            country="India",
        )
    )
    await SupplierService(session, ctx).create_supplier(
        SupplierCreate(
            name="Sri Balaji Spinners",
            supplier_type="YARN",
            payment_terms=PaymentTerms.NET_60,
            lead_time_days=14,
            city="Coimbatore",
            country="India",
        )
    )


def main() -> None:
    """CLI entrypoint to run seeding."""
    asyncio.run(seed_all())


if __name__ == "__main__":
    main()
