"""
Related Products Coordinator

원본 상품 조회 → 전략 실행 → 병합/점수화 → 페이지 구간 보강 순으로 하나의 요청을 처리합니다.
요청 내부는 순차 실행이며 부작용이 없습니다.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

from sqlalchemy.orm import Session

from app.schemas.related import PaginationOut, RelatedMetaOut, RelatedProductsResponse
from app.services.related.catalog import CatalogRepository, ProductSnapshot
from app.services.related.constants import TOTAL_STRATEGIES
from app.services.related.enricher import RelatedProductEnricher
from app.services.related.exceptions import CatalogQueryError, InternalError, ProductNotFoundError
from app.services.related.params import RelatedQueryOptions, RelatedRequest
from app.services.related.scope import Deadline, TenantScope
from app.services.related.scoring import (
    CandidateFacts,
    average_score,
    merge_and_rank,
    strategies_used,
)
from app.services.related.strategies import SourceContext, run_strategies
from app.settings import settings

logger = logging.getLogger(__name__)


def build_pagination(options: RelatedQueryOptions, total_items: int) -> PaginationOut:
    total_pages = math.ceil(total_items / options.limit) if total_items else 0
    return PaginationOut(
        currentPage=options.page,
        totalPages=total_pages,
        totalItems=total_items,
        itemsPerPage=options.limit,
        hasNext=options.page < total_pages,
        hasPrev=options.page > 1,
    )


class RelatedProductsService:
    def __init__(
        self,
        session: Session,
        max_category_depth: Optional[int] = None,
        seller_popular_limit: Optional[int] = None,
    ):
        self.catalog = CatalogRepository(
            session,
            max_category_depth=max_category_depth or settings.related_category_max_depth,
            seller_popular_limit=seller_popular_limit or settings.related_seller_popular_limit,
        )
        self.enricher = RelatedProductEnricher(self.catalog)

    def get_related(self, request: RelatedRequest, deadline: Optional[Deadline] = None) -> RelatedProductsResponse:
        """
        관련 상품 한 페이지를 계산합니다.

        Raises:
            ProductNotFoundError: 원본 상품이 없거나 다른 판매자 소유
            RequestCancelledError: 데드라인 만료 또는 취소
            InternalError: 카탈로그 조회 실패
        """
        deadline = deadline or Deadline.none()
        try:
            return self._get_related(request, deadline)
        except CatalogQueryError as e:
            logger.error(
                f"[RelatedProducts] catalog query failed: operation={e.operation} "
                f"error_type={e.error_type} seller_id={request.scope.seller_id} product_id={request.product_id}"
            )
            raise InternalError(context={"operation": e.operation}) from e

    def _load_source_context(self, scope: TenantScope, source: ProductSnapshot, deadline: Deadline) -> SourceContext:
        ancestors = self.catalog.category_ancestors(scope, source.category_id, deadline)
        category = ancestors[0] if ancestors else None
        parent = None
        if category is not None and len(ancestors) > 1 and ancestors[1].id == category.parent_id:
            parent = ancestors[1]

        return SourceContext(
            product=source,
            category=category,
            parent=parent,
            price_range=self.catalog.price_ranges(scope, [source.id], deadline).get(source.id),
        )

    def _get_related(self, request: RelatedRequest, deadline: Deadline) -> RelatedProductsResponse:
        scope = request.scope
        options = request.options

        source = self.catalog.get_product(scope, request.product_id, deadline)
        if source is None:
            raise ProductNotFoundError(request.product_id)

        ctx = self._load_source_context(scope, source, deadline)
        candidates = run_strategies(ctx, options.strategies, self.catalog, scope, deadline)

        candidate_ids = {c.product_id for c in candidates}
        snapshots = self.catalog.product_snapshots(scope, candidate_ids, deadline)
        variants = self.catalog.variant_summaries(scope, snapshots.keys(), deadline)
        facts = {
            pid: CandidateFacts(snapshot=snapshot, variants=variants.get(pid))
            for pid, snapshot in snapshots.items()
        }

        ranked = merge_and_rank(source, candidates, facts)
        page = ranked[options.offset:options.offset + options.limit]
        items = self.enricher.enrich(scope, page, facts, deadline)

        logger.info(
            f"[RelatedProducts] seller_id={scope.seller_id} product_id={source.id} "
            f"candidates={len(candidate_ids)} ranked={len(ranked)} returned={len(items)}"
        )

        return RelatedProductsResponse(
            relatedProducts=items,
            pagination=build_pagination(options, len(ranked)),
            meta=RelatedMetaOut(
                strategiesUsed=[name.value for name in strategies_used(ranked)],
                totalStrategies=TOTAL_STRATEGIES,
                avgScore=average_score(ranked),
            ),
        )
