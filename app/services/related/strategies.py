"""
Candidate generation strategies

각 전략은 이름, 기본 점수, 적용 가능 여부 판단 함수, 후보 생성 함수를 가진 값입니다.
STRATEGIES 레지스트리는 우선순위 순서로 정렬되어 있습니다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, NamedTuple, Optional

from app.services.related.catalog import CatalogRepository, CategoryNode, PriceRange, ProductSnapshot
from app.services.related.constants import (
    BASE_SCORES,
    PRICE_BAND_LOWER_RATIO,
    PRICE_BAND_UPPER_RATIO,
    TAG_MATCH_MAX_SCORE,
    TAG_MATCH_STEP,
    StrategyName,
)
from app.services.related.scope import Deadline, TenantScope

logger = logging.getLogger(__name__)


class Candidate(NamedTuple):
    """전략 하나가 만든 (후보, 기본 점수, 전략, 사유) 튜플"""
    product_id: int
    base_score: int
    strategy: StrategyName
    reason: str


@dataclass(frozen=True)
class SourceContext:
    """
    원본 상품과 전략들이 공통으로 쓰는 파생 정보.

    category는 원본 카테고리가 보이지 않으면(비활성/타 판매자 소유) None이고,
    그 경우 계층 기반 전략은 적용되지 않습니다.
    """

    product: ProductSnapshot
    category: Optional[CategoryNode] = None
    parent: Optional[CategoryNode] = None
    price_range: Optional[PriceRange] = None

    @property
    def product_id(self) -> int:
        return self.product.id

    @property
    def brand(self) -> str:
        return self.product.brand_key

    @property
    def tags(self) -> frozenset[str]:
        return self.product.tag_set

    @property
    def parent_id(self) -> Optional[int]:
        return self.category.parent_id if self.category else None


GenerateFn = Callable[[SourceContext, CatalogRepository, TenantScope, Deadline], Iterator[Candidate]]


@dataclass(frozen=True)
class Strategy:
    name: StrategyName
    can_apply_to: Callable[[SourceContext], bool]
    generate: GenerateFn

    @property
    def base_score(self) -> int:
        return BASE_SCORES[self.name]


def tag_match_score(overlap: int) -> int:
    """겹치는 태그 수에 따른 tag_matching 기본 점수"""
    if overlap <= 0:
        return 0
    return min(BASE_SCORES[StrategyName.TAG_MATCHING] + TAG_MATCH_STEP * (overlap - 1), TAG_MATCH_MAX_SCORE)


def price_band(price_range: PriceRange) -> tuple[float, float]:
    mid = price_range.mid
    return mid * PRICE_BAND_LOWER_RATIO, mid * PRICE_BAND_UPPER_RATIO


def _format_price(value: float) -> str:
    return f"{value:.2f}"


# ----------------------------------------------------------------------
# same_category
# ----------------------------------------------------------------------

def _same_category(ctx: SourceContext, catalog: CatalogRepository, scope: TenantScope, deadline: Deadline):
    name = StrategyName.SAME_CATEGORY
    reason = f"Same category: {ctx.category.name}" if ctx.category else "Same category"
    for row in catalog.products_in_categories(scope, [ctx.product.category_id], ctx.product_id, deadline):
        yield Candidate(row.product_id, BASE_SCORES[name], name, reason)


# ----------------------------------------------------------------------
# same_brand
# ----------------------------------------------------------------------

def _same_brand(ctx: SourceContext, catalog: CatalogRepository, scope: TenantScope, deadline: Deadline):
    name = StrategyName.SAME_BRAND
    reason = f"Same brand: {ctx.brand}"
    for product_id in catalog.products_by_brand(
        scope, ctx.brand, ctx.product.category_id, ctx.product_id, deadline
    ):
        yield Candidate(product_id, BASE_SCORES[name], name, reason)


# ----------------------------------------------------------------------
# hierarchy
# ----------------------------------------------------------------------

def _sibling_category(ctx: SourceContext, catalog: CatalogRepository, scope: TenantScope, deadline: Deadline):
    name = StrategyName.SIBLING_CATEGORY
    siblings = {node.id: node for node in catalog.category_siblings(scope, ctx.category, deadline)}
    for row in catalog.products_in_categories(scope, list(siblings), ctx.product_id, deadline):
        reason = f"Sibling category: {siblings[row.category_id].name}"
        yield Candidate(row.product_id, BASE_SCORES[name], name, reason)


def _parent_category(ctx: SourceContext, catalog: CatalogRepository, scope: TenantScope, deadline: Deadline):
    name = StrategyName.PARENT_CATEGORY
    reason = f"Parent category: {ctx.parent.name}"
    for row in catalog.products_in_categories(scope, [ctx.parent.id], ctx.product_id, deadline):
        yield Candidate(row.product_id, BASE_SCORES[name], name, reason)


def _child_category(ctx: SourceContext, catalog: CatalogRepository, scope: TenantScope, deadline: Deadline):
    name = StrategyName.CHILD_CATEGORY
    children = {node.id: node for node in catalog.category_children(scope, ctx.category.id, deadline)}
    for row in catalog.products_in_categories(scope, list(children), ctx.product_id, deadline):
        reason = f"Child category: {children[row.category_id].name}"
        yield Candidate(row.product_id, BASE_SCORES[name], name, reason)


# ----------------------------------------------------------------------
# tag_matching
# ----------------------------------------------------------------------

def _tag_matching(ctx: SourceContext, catalog: CatalogRepository, scope: TenantScope, deadline: Deadline):
    name = StrategyName.TAG_MATCHING
    for match in catalog.products_by_tag_overlap(scope, ctx.tags, ctx.product_id, deadline):
        overlap = len(match.shared_tags)
        reason = f"Shared tags ({overlap}): {', '.join(match.shared_tags)}"
        yield Candidate(match.product_id, tag_match_score(overlap), name, reason)


# ----------------------------------------------------------------------
# price_range
# ----------------------------------------------------------------------

def _price_range(ctx: SourceContext, catalog: CatalogRepository, scope: TenantScope, deadline: Deadline):
    name = StrategyName.PRICE_RANGE
    low, high = price_band(ctx.price_range)
    for match in catalog.products_by_price_overlap(scope, low, high, ctx.product_id, deadline):
        reason = (
            f"Similar price range: {_format_price(match.price_range.min)}-{_format_price(match.price_range.max)}"
        )
        yield Candidate(match.product_id, BASE_SCORES[name], name, reason)


# ----------------------------------------------------------------------
# seller_popular
# ----------------------------------------------------------------------

def _seller_popular(ctx: SourceContext, catalog: CatalogRepository, scope: TenantScope, deadline: Deadline):
    name = StrategyName.SELLER_POPULAR
    for product_id in catalog.seller_popular_products(scope, ctx.product_id, deadline):
        yield Candidate(product_id, BASE_SCORES[name], name, "Popular from this seller")


STRATEGIES: dict[StrategyName, Strategy] = {
    StrategyName.SAME_CATEGORY: Strategy(
        StrategyName.SAME_CATEGORY,
        can_apply_to=lambda ctx: True,
        generate=_same_category,
    ),
    StrategyName.SAME_BRAND: Strategy(
        StrategyName.SAME_BRAND,
        can_apply_to=lambda ctx: bool(ctx.brand),
        generate=_same_brand,
    ),
    StrategyName.SIBLING_CATEGORY: Strategy(
        StrategyName.SIBLING_CATEGORY,
        can_apply_to=lambda ctx: ctx.parent_id is not None,
        generate=_sibling_category,
    ),
    StrategyName.PARENT_CATEGORY: Strategy(
        StrategyName.PARENT_CATEGORY,
        can_apply_to=lambda ctx: ctx.parent is not None,
        generate=_parent_category,
    ),
    StrategyName.CHILD_CATEGORY: Strategy(
        StrategyName.CHILD_CATEGORY,
        can_apply_to=lambda ctx: ctx.category is not None,
        generate=_child_category,
    ),
    StrategyName.TAG_MATCHING: Strategy(
        StrategyName.TAG_MATCHING,
        can_apply_to=lambda ctx: bool(ctx.tags),
        generate=_tag_matching,
    ),
    StrategyName.PRICE_RANGE: Strategy(
        StrategyName.PRICE_RANGE,
        can_apply_to=lambda ctx: ctx.price_range is not None,
        generate=_price_range,
    ),
    StrategyName.SELLER_POPULAR: Strategy(
        StrategyName.SELLER_POPULAR,
        can_apply_to=lambda ctx: True,
        generate=_seller_popular,
    ),
}


def run_strategies(
    ctx: SourceContext,
    names: tuple[StrategyName, ...],
    catalog: CatalogRepository,
    scope: TenantScope,
    deadline: Deadline,
) -> list[Candidate]:
    """
    요청된 전략을 우선순위 순서대로 순차 실행합니다.
    한 전략이라도 실패하면 요청 전체가 실패합니다.
    """
    candidates: list[Candidate] = []
    for name in names:
        strategy = STRATEGIES[name]
        if not strategy.can_apply_to(ctx):
            logger.debug(f"[RelatedProducts] strategy skipped: {name.value} (product_id={ctx.product_id})")
            continue
        deadline.check(name.value)
        produced = [c for c in strategy.generate(ctx, catalog, scope, deadline) if c.product_id != ctx.product_id]
        logger.debug(f"[RelatedProducts] strategy {name.value} produced {len(produced)} candidates")
        candidates.extend(produced)
    return candidates
