"""
Enricher

페이지 구간에 포함된 후보에만 표시용 필드(카테고리 이름, 가격 범위, 변형 미리보기)를 붙입니다.
조회는 후보 id 집합 단위로 배치 처리합니다.
"""
from __future__ import annotations

import logging
from typing import Mapping, Sequence

from app.schemas.related import (
    CategoryInfo,
    CategoryRef,
    OptionPreviewOut,
    PriceRangeOut,
    RelatedProductOut,
    VariantPreviewOut,
)
from app.services.related.catalog import CatalogRepository, CategoryNode, OptionPreview
from app.services.related.scope import Deadline, TenantScope
from app.services.related.scoring import CandidateFacts, RankedCandidate

logger = logging.getLogger(__name__)


def _category_info(category_id: int, categories: Mapping[int, CategoryNode]) -> CategoryInfo:
    node = categories.get(category_id)
    if node is None:
        return CategoryInfo(id=category_id, name="")
    parent = categories.get(node.parent_id) if node.parent_id is not None else None
    return CategoryInfo(
        id=node.id,
        name=node.name,
        parent=CategoryRef(id=parent.id, name=parent.name) if parent else None,
    )


def _option_out(preview: OptionPreview) -> OptionPreviewOut:
    return OptionPreviewOut(
        name=preview.name,
        displayName=preview.display_name,
        availableValues=list(preview.available_values),
    )


class RelatedProductEnricher:
    def __init__(self, catalog: CatalogRepository):
        self.catalog = catalog

    def enrich(
        self,
        scope: TenantScope,
        page: Sequence[RankedCandidate],
        facts: Mapping[int, CandidateFacts],
        deadline: Deadline,
    ) -> list[RelatedProductOut]:
        if not page:
            return []

        product_ids = [candidate.product_id for candidate in page]
        category_ids = {facts[pid].snapshot.category_id for pid in product_ids}

        categories = self.catalog.categories_by_ids(scope, category_ids, deadline)
        parent_ids = {node.parent_id for node in categories.values() if node.parent_id is not None}
        missing_parents = parent_ids - categories.keys()
        if missing_parents:
            categories = {**categories, **self.catalog.categories_by_ids(scope, missing_parents, deadline)}

        with_variants = [pid for pid in product_ids if facts[pid].variants and facts[pid].variants.has_variants]
        options = self.catalog.option_previews(scope, with_variants, deadline)

        items: list[RelatedProductOut] = []
        for candidate in page:
            snapshot = facts[candidate.product_id].snapshot
            variants = facts[candidate.product_id].variants
            has_variants = bool(variants and variants.has_variants)

            price_range = None
            if has_variants and variants.price_range is not None:
                price_range = PriceRangeOut(min=variants.price_range.min, max=variants.price_range.max)

            variant_preview = None
            if has_variants:
                variant_preview = VariantPreviewOut(
                    totalVariants=variants.total,
                    options=[_option_out(p) for p in options.get(candidate.product_id, [])],
                )

            items.append(
                RelatedProductOut(
                    id=snapshot.id,
                    name=snapshot.name,
                    sellerId=snapshot.seller_id,
                    brand=snapshot.brand,
                    sku=snapshot.sku or "",
                    tags=list(snapshot.tags),
                    categoryId=snapshot.category_id,
                    category=_category_info(snapshot.category_id, categories),
                    shortDescription=snapshot.short_description,
                    priceRange=price_range,
                    allowPurchase=bool(variants and variants.purchasable > 0),
                    hasVariants=has_variants,
                    variantPreview=variant_preview,
                    score=candidate.score,
                    strategyUsed=candidate.strategy.value,
                    relationReason=candidate.reason,
                    createdAt=snapshot.created_at.isoformat() if snapshot.created_at else None,
                )
            )

        logger.debug(f"[RelatedProducts] enriched {len(items)} items")
        return items
