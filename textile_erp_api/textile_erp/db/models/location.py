from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from textile_erp.db.base import Base, SoftDeleteMixin, TenantMixin, TimestampMixin, UUIDPkMixin


class Location(UUIDPkMixin, TenantMixin, SoftDeleteMixin, TimestampMixin, Base):
    """Company site: branch, warehouse, factory or store."""
    __tablename__ = "locations"
    __table_args__ = (
        UniqueConstraint("company_id", "location_code", name="uq_locations_company_code"),
    )

    location_code: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False, server_default="BRANCH")
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    is_headquarters: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    address_line1: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address_line2: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    country: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
