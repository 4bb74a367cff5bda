# sku_api/models/catalog.py
from __future__ import annotations
from sqlalchemy import String, Integer, Boolean, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sku_api.db import Base

class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sku: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    # prices stay decimal strings, as the REST layer sends them
    regular_price: Mapped[str] = mapped_column(String(32), default="", nullable=False)
    sale_price: Mapped[str] = mapped_column(String(32), default="", nullable=False)
    stock_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    manage_stock: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    short_description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="publish", nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # ISO-8601 strings, stored as received
    date_created: Mapped[str | None] = mapped_column(String(40), nullable=True)
    date_modified: Mapped[str | None] = mapped_column(String(40), nullable=True)
    date_on_sale_from: Mapped[str | None] = mapped_column(String(40), nullable=True)
    date_on_sale_to: Mapped[str | None] = mapped_column(String(40), nullable=True)
    image: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    gallery: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    category_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    tag_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

class Tag(Base):
    __tablename__ = "product_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, index=True)
