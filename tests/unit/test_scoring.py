import pytest

from app.services.related.catalog import PriceRange, ProductSnapshot, VariantSummary
from app.services.related.constants import StrategyName
from app.services.related.scoring import (
    CandidateFacts,
    average_score,
    choose_primary,
    final_score,
    merge_and_rank,
    strategies_used,
    tag_overlap_bonus,
)
from app.services.related.strategies import Candidate, price_band, tag_match_score

pytestmark = pytest.mark.unit


def _snapshot(product_id, category_id=4, brand="Samsung", tags=(), seller_id=2):
    return ProductSnapshot(
        id=product_id,
        seller_id=seller_id,
        category_id=category_id,
        name=f"Product {product_id}",
        brand=brand,
        sku=None,
        tags=tuple(tags),
        short_description=None,
        created_at=None,
    )


def _facts(snapshot, total=0, purchasable=0):
    variants = None
    if total:
        variants = VariantSummary(total=total, purchasable=purchasable, price_range=PriceRange(10.0, 20.0))
    return CandidateFacts(snapshot=snapshot, variants=variants)


SOURCE = _snapshot(103, tags=("smartphone", "samsung", "android", "flagship"))


def test_tag_match_score_steps_and_cap():
    assert tag_match_score(1) == 20
    assert tag_match_score(2) == 30
    assert tag_match_score(4) == 50
    assert tag_match_score(5) == 60
    assert tag_match_score(9) == 60


def test_price_band_uses_midpoint():
    low, high = price_band(PriceRange(799.0, 899.0))
    assert low == pytest.approx(636.75)
    assert high == pytest.approx(1061.25)


def test_choose_primary_prefers_base_score_then_priority():
    group = [
        Candidate(5, 20, StrategyName.PRICE_RANGE, "price"),
        Candidate(5, 20, StrategyName.TAG_MATCHING, "tags"),
        Candidate(5, 15, StrategyName.SELLER_POPULAR, "popular"),
    ]
    assert choose_primary(group).strategy == StrategyName.TAG_MATCHING

    group.append(Candidate(5, 30, StrategyName.TAG_MATCHING, "more tags"))
    assert choose_primary(group).reason == "more tags"


def test_tag_overlap_bonus_requires_two_tags_and_caps():
    one = _snapshot(1, tags=("smartphone",))
    three = _snapshot(2, tags=("smartphone", "samsung", "android"))
    many_source = _snapshot(3, tags=tuple("abcdefg"))
    many_candidate = _snapshot(4, tags=tuple("abcdefgh"))

    assert tag_overlap_bonus(SOURCE, one) == 0
    assert tag_overlap_bonus(SOURCE, three) == 15
    assert tag_overlap_bonus(many_source, many_candidate) == 25


def test_final_score_brand_category_and_multi_strategy_bonus():
    candidate = _snapshot(104, tags=("smartphone", "samsung", "android", "midrange"))
    primary = Candidate(104, 100, StrategyName.SAME_CATEGORY, "Same category: Smartphones")
    # 100 + 10*2 (3개 전략) + 50 (브랜드+카테고리) + 15 (태그 3개)
    assert final_score(SOURCE, primary, 3, _facts(candidate)) == 185


def test_final_score_no_brand_bonus_for_blank_brand():
    source = _snapshot(1, brand="  ")
    candidate = _snapshot(2, brand="  ")
    primary = Candidate(2, 100, StrategyName.SAME_CATEGORY, "x")
    assert final_score(source, primary, 1, _facts(candidate)) == 100


def test_final_score_out_of_stock_penalty_and_floor():
    candidate = _snapshot(149, category_id=17, brand="Other")
    popular = Candidate(149, 15, StrategyName.SELLER_POPULAR, "Popular from this seller")
    assert final_score(SOURCE, popular, 1, _facts(candidate, total=1, purchasable=0)) == 1

    brand = Candidate(149, 80, StrategyName.SAME_BRAND, "Same brand: Samsung")
    assert final_score(SOURCE, brand, 1, _facts(candidate, total=2, purchasable=0)) == 30
    # 변형이 없으면 패널티 없음
    assert final_score(SOURCE, brand, 1, _facts(candidate)) == 80
    # 하나라도 구매 가능하면 패널티 없음
    assert final_score(SOURCE, brand, 1, _facts(candidate, total=2, purchasable=1)) == 80


def test_merge_and_rank_orders_by_score_priority_and_id():
    candidates = [
        Candidate(7, 20, StrategyName.PRICE_RANGE, "Similar price range: 1.00-2.00"),
        Candidate(6, 20, StrategyName.TAG_MATCHING, "Shared tags (1): smartphone"),
        Candidate(5, 20, StrategyName.TAG_MATCHING, "Shared tags (1): smartphone"),
        Candidate(8, 70, StrategyName.SIBLING_CATEGORY, "Sibling category: Laptops"),
        Candidate(8, 15, StrategyName.SELLER_POPULAR, "Popular from this seller"),
    ]
    facts = {
        pid: _facts(_snapshot(pid, category_id=99, brand="Other", tags=("smartphone",)))
        for pid in (5, 6, 7, 8)
    }
    ranked = merge_and_rank(SOURCE, candidates, facts)

    assert [r.product_id for r in ranked] == [8, 5, 6, 7]
    assert ranked[0].score == 80
    assert ranked[0].strategy == StrategyName.SIBLING_CATEGORY
    assert ranked[0].strategies == (StrategyName.SIBLING_CATEGORY, StrategyName.SELLER_POPULAR)
    assert ranked[3].strategy == StrategyName.PRICE_RANGE


def test_merge_and_rank_drops_source_missing_and_foreign_candidates():
    candidates = [
        Candidate(103, 100, StrategyName.SAME_CATEGORY, "self"),
        Candidate(500, 100, StrategyName.SAME_CATEGORY, "deleted"),
        Candidate(160, 100, StrategyName.SAME_CATEGORY, "other seller"),
        Candidate(104, 15, StrategyName.SELLER_POPULAR, "Popular from this seller"),
    ]
    facts = {
        103: _facts(SOURCE),
        160: _facts(_snapshot(160, seller_id=3)),
        104: _facts(_snapshot(104, category_id=5, brand="Other")),
    }
    ranked = merge_and_rank(SOURCE, candidates, facts)
    assert [r.product_id for r in ranked] == [104]


def test_strategies_used_and_average_score():
    candidates = [
        Candidate(1, 15, StrategyName.SELLER_POPULAR, "Popular from this seller"),
        Candidate(2, 80, StrategyName.SAME_BRAND, "Same brand: Samsung"),
        Candidate(2, 20, StrategyName.TAG_MATCHING, "Shared tags (1): samsung"),
    ]
    facts = {
        1: _facts(_snapshot(1, category_id=5, brand="Other")),
        2: _facts(_snapshot(2, category_id=5, tags=("samsung",))),
    }
    ranked = merge_and_rank(SOURCE, candidates, facts)

    assert strategies_used(ranked) == [
        StrategyName.SAME_BRAND,
        StrategyName.TAG_MATCHING,
        StrategyName.SELLER_POPULAR,
    ]
    assert [r.score for r in ranked] == [90, 15]
    assert average_score(ranked) == pytest.approx(52.5)
    assert average_score([]) == 0.0


def test_brand_bonus_trims_spaces_only():
    primary = Candidate(2, 100, StrategyName.SAME_CATEGORY, "Same category: Smartphones")

    padded = _snapshot(2, brand="  Samsung ")
    assert final_score(SOURCE, primary, 1, _facts(padded)) == 150

    # 탭은 제거하지 않음: SQL TRIM()과 같은 기준
    tabbed = _snapshot(2, brand="Samsung\t")
    assert final_score(SOURCE, primary, 1, _facts(tabbed)) == 100
