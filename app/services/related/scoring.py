"""
Scorer & Merger

후보 튜플을 상품별로 병합하고 최종 점수를 계산합니다. 저장소 접근 없이 순수 함수로만 구성됩니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from app.services.related.catalog import ProductSnapshot, VariantSummary
from app.services.related.constants import (
    BRAND_CATEGORY_BONUS,
    MIN_FINAL_SCORE,
    MULTI_STRATEGY_BONUS,
    OUT_OF_STOCK_PENALTY,
    STRATEGY_PRIORITY,
    TAG_OVERLAP_BONUS_CAP,
    TAG_OVERLAP_BONUS_MIN_OVERLAP,
    TAG_OVERLAP_BONUS_PER_TAG,
    StrategyName,
)
from app.services.related.strategies import Candidate


@dataclass(frozen=True)
class CandidateFacts:
    snapshot: ProductSnapshot
    variants: Optional[VariantSummary] = None


@dataclass(frozen=True)
class RankedCandidate:
    product_id: int
    score: int
    strategy: StrategyName
    reason: str
    strategies: tuple[StrategyName, ...]


def choose_primary(group: Iterable[Candidate]) -> Candidate:
    """기본 점수가 가장 높은 튜플, 동점이면 우선순위가 높은 전략"""
    return min(group, key=lambda c: (-c.base_score, STRATEGY_PRIORITY[c.strategy]))


def tag_overlap_bonus(source: ProductSnapshot, candidate: ProductSnapshot) -> int:
    overlap = len(source.tag_set & candidate.tag_set)
    if overlap < TAG_OVERLAP_BONUS_MIN_OVERLAP:
        return 0
    return min(TAG_OVERLAP_BONUS_PER_TAG * overlap, TAG_OVERLAP_BONUS_CAP)


def final_score(
    source: ProductSnapshot,
    primary: Candidate,
    strategy_count: int,
    facts: CandidateFacts,
) -> int:
    """
    최종 점수 계산.

    - 기본 점수 (선택된 튜플)
    - 다중 전략 보너스: 추가 전략 하나당 +10
    - 같은 브랜드이면서 같은 카테고리: +50
    - 태그 2개 이상 겹침: 겹친 수 x 5 (최대 25)
    - 변형이 있는데 모두 구매 불가: -50
    최종 점수는 1 미만으로 내려가지 않습니다.
    """
    candidate = facts.snapshot
    score = primary.base_score
    score += MULTI_STRATEGY_BONUS * max(strategy_count - 1, 0)

    if source.brand_key and candidate.brand_key == source.brand_key and candidate.category_id == source.category_id:
        score += BRAND_CATEGORY_BONUS

    score += tag_overlap_bonus(source, candidate)

    if facts.variants is not None and facts.variants.out_of_stock:
        score -= OUT_OF_STOCK_PENALTY

    return max(score, MIN_FINAL_SCORE)


def merge_and_rank(
    source: ProductSnapshot,
    candidates: Iterable[Candidate],
    facts: Mapping[int, CandidateFacts],
) -> list[RankedCandidate]:
    """
    같은 상품의 튜플을 하나로 병합하고 (점수 내림차순, 전략 우선순위, 상품 id) 순으로 정렬합니다.

    facts에 없는 후보(조회 사이에 삭제되었거나 다른 판매자 소유)는 제외됩니다.
    """
    grouped: dict[int, list[Candidate]] = {}
    for candidate in candidates:
        if candidate.product_id == source.id:
            continue
        grouped.setdefault(candidate.product_id, []).append(candidate)

    ranked: list[RankedCandidate] = []
    for product_id, group in grouped.items():
        candidate_facts = facts.get(product_id)
        if candidate_facts is None or candidate_facts.snapshot.seller_id != source.seller_id:
            continue
        primary = choose_primary(group)
        strategies = tuple(sorted({c.strategy for c in group}, key=STRATEGY_PRIORITY.__getitem__))
        ranked.append(
            RankedCandidate(
                product_id=product_id,
                score=final_score(source, primary, len(strategies), candidate_facts),
                strategy=primary.strategy,
                reason=primary.reason,
                strategies=strategies,
            )
        )

    ranked.sort(key=lambda r: (-r.score, STRATEGY_PRIORITY[r.strategy], r.product_id))
    return ranked


def strategies_used(ranked: Iterable[RankedCandidate]) -> list[StrategyName]:
    """최종 후보에 튜플을 하나 이상 기여한 전략 (우선순위 순서)"""
    used: set[StrategyName] = set()
    for candidate in ranked:
        used.update(candidate.strategies)
    return [name for name in StrategyName if name in used]


def average_score(ranked: list[RankedCandidate]) -> float:
    if not ranked:
        return 0.0
    return sum(r.score for r in ranked) / len(ranked)
