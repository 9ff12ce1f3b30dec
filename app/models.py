from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Float, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


# SQLite는 BIGINT PK 자동 증가를 지원하지 않으므로 테스트 환경에서는 INTEGER로 대체
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")


class CatalogBase(DeclarativeBase):
    pass


class Category(CatalogBase):
    """
    카테고리 트리 (forest). seller_id가 NULL이면 글로벌 카테고리입니다.
    """
    __tablename__ = "category"
    __table_args__ = (
        Index("idx_category_parent", "parent_id"),
        Index("idx_category_seller_id", "seller_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    parent_id: Mapped[int | None] = mapped_column(BigIntPK, ForeignKey("category.id", ondelete="RESTRICT"), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    seller_id: Mapped[int | None] = mapped_column(BigIntPK, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Product(CatalogBase):
    __tablename__ = "product"
    __table_args__ = (
        Index("idx_product_category_seller", "category_id", "seller_id"),
        Index("idx_product_brand_seller", "brand", "seller_id"),
        Index("idx_product_seller_created", "seller_id", "created_at"),
        Index("idx_product_tags", "tags", postgresql_using="gin"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    seller_id: Mapped[int] = mapped_column(BigIntPK, nullable=False)  # tenant
    category_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("category.id", ondelete="RESTRICT"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    brand: Mapped[str | None] = mapped_column(Text, nullable=True)
    base_sku: Mapped[str | None] = mapped_column(Text, nullable=True, unique=True)
    short_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category: Mapped[Category] = relationship()
    variants: Mapped[list["ProductVariant"]] = relationship(back_populates="product", cascade="all, delete-orphan")
    options: Mapped[list["ProductOption"]] = relationship(back_populates="product", cascade="all, delete-orphan")


class ProductVariant(CatalogBase):
    __tablename__ = "product_variant"
    __table_args__ = (
        Index("idx_variant_product_price", "product_id", "price"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("product.id", ondelete="CASCADE"), nullable=False)
    sku: Mapped[str | None] = mapped_column(Text, nullable=True, unique=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    allow_purchase: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_popular: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product: Mapped[Product] = relationship(back_populates="variants")


class ProductOption(CatalogBase):
    __tablename__ = "product_option"
    __table_args__ = (
        UniqueConstraint("product_id", "name", name="uq_product_option_product_name"),
        Index("idx_product_option_product_id", "product_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("product.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product: Mapped[Product] = relationship(back_populates="options")
    values: Mapped[list["ProductOptionValue"]] = relationship(back_populates="option", cascade="all, delete-orphan")


class ProductOptionValue(CatalogBase):
    __tablename__ = "product_option_value"
    __table_args__ = (
        UniqueConstraint("option_id", "value", name="uq_product_option_value_option_value"),
        Index("idx_product_option_value_option_id", "option_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    option_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("product_option.id", ondelete="CASCADE"), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    color_code: Mapped[str | None] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    option: Mapped[ProductOption] = relationship(back_populates="values")


class VariantOptionValue(CatalogBase):
    """
    variant ↔ (option, option value) 매핑. 변형 공간을 기술합니다.
    """
    __tablename__ = "variant_option_value"
    __table_args__ = (
        UniqueConstraint("variant_id", "option_id", "option_value_id", name="uq_variant_option_value"),
        Index("idx_variant_option_value_variant_id", "variant_id"),
        Index("idx_variant_option_value_option_value_id", "option_value_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    variant_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("product_variant.id", ondelete="CASCADE"), nullable=False)
    option_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("product_option.id", ondelete="CASCADE"), nullable=False)
    option_value_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("product_option_value.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
