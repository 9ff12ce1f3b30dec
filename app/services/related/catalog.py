"""
Catalog accessors (seller-scoped)

모든 읽기는 TenantScope의 seller_id로 필터링됩니다. 카테고리 탐색은
활성 상태이면서 글로벌이거나 같은 판매자 소유인 카테고리만 봅니다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.dialects.postgresql import array
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select
from sqlalchemy.types import Text

from app.models import (
    Category,
    Product,
    ProductOption,
    ProductOptionValue,
    ProductVariant,
    VariantOptionValue,
)
from app.services.related.exceptions import CatalogQueryError, RequestCancelledError
from app.services.related.scope import Deadline, TenantScope, require_scope

logger = logging.getLogger(__name__)

DEFAULT_MAX_CATEGORY_DEPTH = 16
DEFAULT_SELLER_POPULAR_LIMIT = 50


def normalize_brand(brand: Optional[str]) -> str:
    """
    브랜드 비교 키. SQL TRIM()과 같게 앞뒤 공백 문자(' ')만 제거합니다.
    공백만 있는 브랜드는 브랜드 없음("")으로 취급합니다.
    """
    return (brand or "").strip(" ")


@dataclass(frozen=True)
class ProductSnapshot:
    id: int
    seller_id: int
    category_id: int
    name: str
    brand: str
    sku: Optional[str]
    tags: tuple[str, ...]
    short_description: Optional[str]
    created_at: Optional[datetime]

    @property
    def brand_key(self) -> str:
        return normalize_brand(self.brand)

    @property
    def tag_set(self) -> frozenset[str]:
        return frozenset(self.tags)


@dataclass(frozen=True)
class CategoryNode:
    id: int
    name: str
    parent_id: Optional[int]


@dataclass(frozen=True)
class PriceRange:
    min: float
    max: float

    @property
    def mid(self) -> float:
        return (self.min + self.max) / 2


@dataclass(frozen=True)
class VariantSummary:
    total: int
    purchasable: int
    price_range: Optional[PriceRange]

    @property
    def has_variants(self) -> bool:
        return self.total > 0

    @property
    def out_of_stock(self) -> bool:
        return self.total > 0 and self.purchasable == 0


@dataclass(frozen=True)
class OptionPreview:
    name: str
    display_name: str
    available_values: tuple[str, ...]


@dataclass(frozen=True)
class CategoryProduct:
    product_id: int
    category_id: int


@dataclass(frozen=True)
class TagMatch:
    product_id: int
    shared_tags: tuple[str, ...]


@dataclass(frozen=True)
class PriceMatch:
    product_id: int
    price_range: PriceRange


def _visible_category(scope: TenantScope):
    return and_(
        Category.is_active.is_(True),
        or_(Category.seller_id.is_(None), Category.seller_id == scope.seller_id),
    )


def _normalize_tags(raw: object) -> tuple[str, ...]:
    if not raw:
        return ()
    if isinstance(raw, str):
        return (raw,)
    return tuple(str(tag) for tag in raw)


class CatalogRepository:
    """
    관련 상품 엔진이 사용하는 읽기 전용 카탈로그 접근자 모음.

    각 메서드는 (scope, ..., deadline) 형태이며 scope 없이 호출되면 TypeError로 즉시 실패합니다.
    쿼리 실패는 CatalogQueryError로, 데드라인 만료는 RequestCancelledError로 전달됩니다.
    """

    def __init__(
        self,
        session: Session,
        max_category_depth: int = DEFAULT_MAX_CATEGORY_DEPTH,
        seller_popular_limit: int = DEFAULT_SELLER_POPULAR_LIMIT,
    ):
        self.session = session
        self.max_category_depth = max_category_depth
        self.seller_popular_limit = seller_popular_limit

    @property
    def dialect_name(self) -> str:
        return self.session.get_bind().dialect.name

    def _apply_statement_timeout(self, deadline: Deadline) -> None:
        remaining = deadline.remaining()
        if remaining is None or self.dialect_name != "postgresql":
            return
        timeout_ms = max(1, int(remaining * 1000))
        # 트랜잭션 로컬 설정 (is_local=true)
        self.session.execute(select(func.set_config("statement_timeout", str(timeout_ms), True)))

    def _execute(self, stmt: Select, deadline: Deadline, operation: str) -> list:
        deadline.check(operation)
        try:
            self._apply_statement_timeout(deadline)
            return list(self.session.execute(stmt).all())
        except SQLAlchemyError as e:
            if deadline.expired:
                raise RequestCancelledError(operation) from e
            logger.warning(f"[Catalog] {operation} failed: {type(e).__name__}")
            raise CatalogQueryError(operation, e) from e

    # ------------------------------------------------------------------
    # products
    # ------------------------------------------------------------------

    @staticmethod
    def _snapshot_columns() -> tuple:
        return (
            Product.id,
            Product.seller_id,
            Product.category_id,
            Product.name,
            Product.brand,
            Product.base_sku,
            Product.tags,
            Product.short_description,
            Product.created_at,
        )

    @staticmethod
    def _to_snapshot(row) -> ProductSnapshot:
        return ProductSnapshot(
            id=row.id,
            seller_id=row.seller_id,
            category_id=row.category_id,
            name=row.name,
            brand=row.brand or "",
            sku=row.base_sku,
            tags=_normalize_tags(row.tags),
            short_description=row.short_description,
            created_at=row.created_at,
        )

    def get_product(self, scope: TenantScope, product_id: int, deadline: Deadline) -> Optional[ProductSnapshot]:
        """다른 판매자 상품이면 None (존재 여부를 드러내지 않음)"""
        scope = require_scope(scope)
        stmt = (
            select(*self._snapshot_columns())
            .where(Product.id == product_id)
            .where(Product.seller_id == scope.seller_id)
        )
        rows = self._execute(stmt, deadline, "get_product")
        return self._to_snapshot(rows[0]) if rows else None

    def product_snapshots(
        self, scope: TenantScope, product_ids: Iterable[int], deadline: Deadline
    ) -> dict[int, ProductSnapshot]:
        scope = require_scope(scope)
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        stmt = (
            select(*self._snapshot_columns())
            .where(Product.id.in_(ids))
            .where(Product.seller_id == scope.seller_id)
        )
        rows = self._execute(stmt, deadline, "product_snapshots")
        return {row.id: self._to_snapshot(row) for row in rows}

    def products_in_categories(
        self,
        scope: TenantScope,
        category_ids: Sequence[int],
        exclude_product_id: int,
        deadline: Deadline,
    ) -> list[CategoryProduct]:
        scope = require_scope(scope)
        if not category_ids:
            return []
        stmt = (
            select(Product.id, Product.category_id)
            .where(Product.seller_id == scope.seller_id)
            .where(Product.category_id.in_(list(category_ids)))
            .where(Product.id != exclude_product_id)
            .order_by(Product.id)
        )
        rows = self._execute(stmt, deadline, "products_in_categories")
        return [CategoryProduct(product_id=row.id, category_id=row.category_id) for row in rows]

    def products_by_brand(
        self,
        scope: TenantScope,
        brand: str,
        exclude_category_id: int,
        exclude_product_id: int,
        deadline: Deadline,
    ) -> list[int]:
        """같은 브랜드이면서 다른 카테고리에 속한 상품"""
        scope = require_scope(scope)
        brand = normalize_brand(brand)
        if not brand:
            return []
        stmt = (
            select(Product.id)
            .where(Product.seller_id == scope.seller_id)
            .where(func.trim(Product.brand) == brand)
            .where(Product.category_id != exclude_category_id)
            .where(Product.id != exclude_product_id)
            .order_by(Product.id)
        )
        return [row.id for row in self._execute(stmt, deadline, "products_by_brand")]

    def products_by_tag_overlap(
        self,
        scope: TenantScope,
        tags: Iterable[str],
        exclude_product_id: int,
        deadline: Deadline,
    ) -> list[TagMatch]:
        """
        태그가 하나 이상 겹치는 상품.

        PostgreSQL에서는 GIN 인덱스(?| 연산자)로 후보를 좁히고, 정확한 교집합은 여기서 계산합니다.
        """
        scope = require_scope(scope)
        wanted = frozenset(tags)
        if not wanted:
            return []
        stmt = (
            select(Product.id, Product.tags)
            .where(Product.seller_id == scope.seller_id)
            .where(Product.id != exclude_product_id)
            .order_by(Product.id)
        )
        if self.dialect_name == "postgresql":
            stmt = stmt.where(Product.tags.has_any(array(sorted(wanted), type_=Text)))

        matches: list[TagMatch] = []
        for row in self._execute(stmt, deadline, "products_by_tag_overlap"):
            shared = wanted.intersection(_normalize_tags(row.tags))
            if shared:
                matches.append(TagMatch(product_id=row.id, shared_tags=tuple(sorted(shared))))
        return matches

    def _variant_aggregate(self, scope: TenantScope):
        """
        상품별 변형 집계 서브쿼리.

        구매 가능한 변형이 있으면 그 가격만, 없으면 전체 변형 가격으로 범위를 계산합니다.
        """
        purchasable_price = case((ProductVariant.allow_purchase.is_(True), ProductVariant.price), else_=None)
        purchasable_count = func.count(case((ProductVariant.allow_purchase.is_(True), 1), else_=None))
        return (
            select(
                ProductVariant.product_id.label("product_id"),
                func.count(ProductVariant.id).label("total"),
                purchasable_count.label("purchasable"),
                func.coalesce(func.min(purchasable_price), func.min(ProductVariant.price)).label("min_price"),
                func.coalesce(func.max(purchasable_price), func.max(ProductVariant.price)).label("max_price"),
            )
            .join(Product, Product.id == ProductVariant.product_id)
            .where(Product.seller_id == scope.seller_id)
            .group_by(ProductVariant.product_id)
        )

    def variant_summaries(
        self, scope: TenantScope, product_ids: Iterable[int], deadline: Deadline
    ) -> dict[int, VariantSummary]:
        """변형이 없는 상품은 결과에 포함되지 않습니다."""
        scope = require_scope(scope)
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        stmt = self._variant_aggregate(scope).where(ProductVariant.product_id.in_(ids))
        summaries: dict[int, VariantSummary] = {}
        for row in self._execute(stmt, deadline, "variant_summaries"):
            price_range = None
            if row.total and row.min_price is not None:
                price_range = PriceRange(min=float(row.min_price), max=float(row.max_price))
            summaries[row.product_id] = VariantSummary(
                total=int(row.total),
                purchasable=int(row.purchasable),
                price_range=price_range,
            )
        return summaries

    def price_ranges(
        self, scope: TenantScope, product_ids: Iterable[int], deadline: Deadline
    ) -> dict[int, PriceRange]:
        summaries = self.variant_summaries(scope, product_ids, deadline)
        return {pid: s.price_range for pid, s in summaries.items() if s.price_range is not None}

    def products_by_price_overlap(
        self,
        scope: TenantScope,
        low: float,
        high: float,
        exclude_product_id: int,
        deadline: Deadline,
    ) -> list[PriceMatch]:
        """가격 범위가 [low, high] 구간과 겹치는 상품"""
        scope = require_scope(scope)
        agg = self._variant_aggregate(scope).subquery()
        stmt = (
            select(agg.c.product_id, agg.c.min_price, agg.c.max_price)
            .where(agg.c.product_id != exclude_product_id)
            .where(agg.c.min_price <= high)
            .where(agg.c.max_price >= low)
            .order_by(agg.c.product_id)
        )
        return [
            PriceMatch(
                product_id=row.product_id,
                price_range=PriceRange(min=float(row.min_price), max=float(row.max_price)),
            )
            for row in self._execute(stmt, deadline, "products_by_price_overlap")
        ]

    def seller_popular_products(
        self,
        scope: TenantScope,
        exclude_product_id: int,
        deadline: Deadline,
        limit: Optional[int] = None,
    ) -> list[int]:
        """판매자의 최신 상품 (created_at 내림차순, 동률은 id 오름차순)"""
        scope = require_scope(scope)
        stmt = (
            select(Product.id)
            .where(Product.seller_id == scope.seller_id)
            .where(Product.id != exclude_product_id)
            .order_by(Product.created_at.desc(), Product.id.asc())
            .limit(limit or self.seller_popular_limit)
        )
        return [row.id for row in self._execute(stmt, deadline, "seller_popular_products")]

    # ------------------------------------------------------------------
    # categories
    # ------------------------------------------------------------------

    def get_category(self, scope: TenantScope, category_id: int, deadline: Deadline) -> Optional[CategoryNode]:
        scope = require_scope(scope)
        stmt = (
            select(Category.id, Category.name, Category.parent_id)
            .where(Category.id == category_id)
            .where(_visible_category(scope))
        )
        rows = self._execute(stmt, deadline, "get_category")
        if not rows:
            return None
        row = rows[0]
        return CategoryNode(id=row.id, name=row.name, parent_id=row.parent_id)

    def category_ancestors(self, scope: TenantScope, category_id: int, deadline: Deadline) -> list[CategoryNode]:
        """
        자기 자신부터 루트 방향으로 올라가는 경로 ([self, parent, grandparent, ...]).

        max_category_depth에서 멈추며 순환이 있어도 종료합니다.
        보이지 않는 카테고리를 만나면 그 지점에서 끊깁니다.
        """
        scope = require_scope(scope)
        path: list[CategoryNode] = []
        visited: set[int] = set()
        current: Optional[int] = category_id
        while current is not None and current not in visited and len(path) < self.max_category_depth:
            visited.add(current)
            node = self.get_category(scope, current, deadline)
            if node is None:
                break
            path.append(node)
            current = node.parent_id
        return path

    def category_siblings(self, scope: TenantScope, category: CategoryNode, deadline: Deadline) -> list[CategoryNode]:
        scope = require_scope(scope)
        if category.parent_id is None:
            return []
        stmt = (
            select(Category.id, Category.name, Category.parent_id)
            .where(Category.parent_id == category.parent_id)
            .where(Category.id != category.id)
            .where(_visible_category(scope))
            .order_by(Category.id)
        )
        rows = self._execute(stmt, deadline, "category_siblings")
        return [CategoryNode(id=row.id, name=row.name, parent_id=row.parent_id) for row in rows]

    def category_children(self, scope: TenantScope, category_id: int, deadline: Deadline) -> list[CategoryNode]:
        scope = require_scope(scope)
        stmt = (
            select(Category.id, Category.name, Category.parent_id)
            .where(Category.parent_id == category_id)
            .where(Category.id != category_id)
            .where(_visible_category(scope))
            .order_by(Category.id)
        )
        rows = self._execute(stmt, deadline, "category_children")
        return [CategoryNode(id=row.id, name=row.name, parent_id=row.parent_id) for row in rows]

    def categories_by_ids(
        self, scope: TenantScope, category_ids: Iterable[int], deadline: Deadline
    ) -> dict[int, CategoryNode]:
        """
        응답 보강용 이름 조회. 비활성 카테고리도 이름은 표시하므로 소유권만 확인합니다.
        """
        scope = require_scope(scope)
        ids = sorted({cid for cid in category_ids if cid is not None})
        if not ids:
            return {}
        stmt = (
            select(Category.id, Category.name, Category.parent_id)
            .where(Category.id.in_(ids))
            .where(or_(Category.seller_id.is_(None), Category.seller_id == scope.seller_id))
        )
        rows = self._execute(stmt, deadline, "categories_by_ids")
        return {row.id: CategoryNode(id=row.id, name=row.name, parent_id=row.parent_id) for row in rows}

    # ------------------------------------------------------------------
    # options
    # ------------------------------------------------------------------

    def option_previews(
        self, scope: TenantScope, product_ids: Iterable[int], deadline: Deadline
    ) -> dict[int, list[OptionPreview]]:
        """
        상품별 옵션 미리보기.

        옵션은 position 순서, 값은 어떤 변형에든 실제로 연결된 값만 position 순서로 포함합니다.
        """
        scope = require_scope(scope)
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        options_stmt = (
            select(
                ProductOption.id,
                ProductOption.product_id,
                ProductOption.name,
                ProductOption.display_name,
            )
            .join(Product, Product.id == ProductOption.product_id)
            .where(Product.id.in_(ids))
            .where(Product.seller_id == scope.seller_id)
            .order_by(ProductOption.product_id, ProductOption.position, ProductOption.id)
        )
        option_rows = self._execute(options_stmt, deadline, "option_previews.options")
        if not option_rows:
            return {}

        values_stmt = (
            select(
                ProductOptionValue.option_id,
                ProductOptionValue.id,
                ProductOptionValue.value,
                ProductOptionValue.position,
            )
            .join(VariantOptionValue, VariantOptionValue.option_value_id == ProductOptionValue.id)
            .join(ProductVariant, ProductVariant.id == VariantOptionValue.variant_id)
            .join(Product, Product.id == ProductVariant.product_id)
            .where(Product.id.in_(ids))
            .where(Product.seller_id == scope.seller_id)
            .distinct()
            .order_by(ProductOptionValue.option_id, ProductOptionValue.position, ProductOptionValue.id)
        )
        values_by_option: dict[int, list[str]] = {}
        for row in self._execute(values_stmt, deadline, "option_previews.values"):
            values_by_option.setdefault(row.option_id, []).append(row.value)

        previews: dict[int, list[OptionPreview]] = {}
        for row in option_rows:
            previews.setdefault(row.product_id, []).append(
                OptionPreview(
                    name=row.name,
                    display_name=row.display_name or row.name,
                    available_values=tuple(values_by_option.get(row.id, ())),
                )
            )
        return previews
