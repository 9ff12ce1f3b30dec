"""
데모 카탈로그 기반 전략/카탈로그 접근자 테스트
"""
import pytest

from app.models import Category, Product, ProductVariant
from app.services.related.catalog import CatalogRepository, PriceRange, normalize_brand
from app.services.related.constants import StrategyName
from app.services.related.scope import Deadline, TenantScope
from app.services.related.service import RelatedProductsService
from app.services.related.strategies import STRATEGIES, run_strategies

pytestmark = pytest.mark.unit

SELLER_2 = TenantScope(2)
SELLER_3 = TenantScope(3)


@pytest.fixture
def catalog(catalog_session):
    return CatalogRepository(catalog_session)


@pytest.fixture
def context_for(catalog_session):
    service = RelatedProductsService(catalog_session, max_category_depth=16, seller_popular_limit=50)

    def _context(product_id, scope=SELLER_2):
        source = service.catalog.get_product(scope, product_id, Deadline.none())
        return service._load_source_context(scope, source, Deadline.none())

    return _context


def _generate(name, ctx, catalog, scope=SELLER_2):
    return list(STRATEGIES[name].generate(ctx, catalog, scope, Deadline.none()))


def test_registry_is_in_priority_order():
    assert list(STRATEGIES) == list(StrategyName)
    assert [s.base_score for s in STRATEGIES.values()] == [100, 80, 70, 60, 50, 20, 20, 15]


def test_get_product_is_seller_scoped(catalog):
    assert catalog.get_product(SELLER_2, 101, Deadline.none()).name == "iPhone 14"
    assert catalog.get_product(SELLER_3, 101, Deadline.none()) is None
    assert catalog.get_product(SELLER_2, 99999, Deadline.none()) is None


def test_source_context_resolves_category_and_parent(context_for):
    ctx = context_for(103)
    assert ctx.category.name == "Smartphones"
    assert ctx.parent.name == "Electronics"
    assert ctx.brand == "Samsung"
    assert ctx.price_range is None

    ctx = context_for(101)
    assert (ctx.price_range.min, ctx.price_range.max) == (799.0, 899.0)


def test_same_category_excludes_source_and_other_sellers(context_for, catalog):
    candidates = _generate(StrategyName.SAME_CATEGORY, context_for(103), catalog)
    ids = {c.product_id for c in candidates}

    assert 103 not in ids
    assert 160 not in ids  # 판매자 3 소유
    assert {1, 2, 101, 104, 110} <= ids
    assert all(c.base_score == 100 for c in candidates)
    assert all(c.reason == "Same category: Smartphones" for c in candidates)


def test_same_brand_only_other_categories(context_for, catalog):
    candidates = _generate(StrategyName.SAME_BRAND, context_for(103), catalog)
    assert [c.product_id for c in candidates] == [124, 125, 131, 149, 151]
    assert candidates[0].reason == "Same brand: Samsung"


def test_same_brand_matches_like_brand_bonus(catalog_session, context_for, catalog):
    catalog_session.get(Product, 124).brand = "  Samsung "
    catalog_session.get(Product, 131).brand = "Samsung\t"
    catalog_session.flush()

    candidates = _generate(StrategyName.SAME_BRAND, context_for(103), catalog)
    assert [c.product_id for c in candidates] == [124, 125, 149, 151]

    assert normalize_brand("  Samsung ") == "Samsung"
    assert normalize_brand("Samsung\t") == "Samsung\t"
    assert normalize_brand(None) == ""


def test_same_brand_skipped_for_blank_brand(catalog_session, context_for):
    assert STRATEGIES[StrategyName.SAME_BRAND].can_apply_to(context_for(150))

    catalog_session.get(Product, 150).brand = "   "
    catalog_session.flush()
    assert not STRATEGIES[StrategyName.SAME_BRAND].can_apply_to(context_for(150))


def test_category_navigation_hides_foreign_and_inactive(catalog):
    smartphones = catalog.get_category(SELLER_2, 4, Deadline.none())

    siblings = [node.id for node in catalog.category_siblings(SELLER_2, smartphones, Deadline.none())]
    assert siblings == [5, 6, 12, 13, 14, 15, 16]

    # 판매자 3은 자신의 카테고리를 볼 수 있음
    siblings_3 = [node.id for node in catalog.category_siblings(SELLER_3, smartphones, Deadline.none())]
    assert 19 in siblings_3

    children = [node.id for node in catalog.category_children(SELLER_2, 4, Deadline.none())]
    assert children == [17, 18]  # 20은 비활성


def test_hierarchy_strategies(context_for, catalog):
    ctx = context_for(103)

    siblings = _generate(StrategyName.SIBLING_CATEGORY, ctx, catalog)
    assert {c.product_id for c in siblings} >= {3, 4, 111, 121, 129, 135, 143}
    laptop = next(c for c in siblings if c.product_id == 111)
    assert laptop.reason == "Sibling category: Laptops"

    assert _generate(StrategyName.PARENT_CATEGORY, ctx, catalog) == []

    children = _generate(StrategyName.CHILD_CATEGORY, ctx, catalog)
    assert [c.product_id for c in children] == [148, 149, 150, 151]
    assert children[0].reason == "Child category: iOS Phones"
    assert children[1].reason == "Child category: Android Phones"


def test_parent_category_for_leaf(context_for, catalog):
    ctx = context_for(149)  # Android Phones → Smartphones
    assert STRATEGIES[StrategyName.PARENT_CATEGORY].can_apply_to(ctx)
    parents = _generate(StrategyName.PARENT_CATEGORY, ctx, catalog)
    assert 103 in {c.product_id for c in parents}
    assert all(c.reason == "Parent category: Smartphones" for c in parents)


def test_root_category_skips_sibling_and_parent(catalog_session, context_for):
    catalog_session.get(Product, 150).category_id = 1
    catalog_session.flush()

    ctx = context_for(150)
    assert not STRATEGIES[StrategyName.SIBLING_CATEGORY].can_apply_to(ctx)
    assert not STRATEGIES[StrategyName.PARENT_CATEGORY].can_apply_to(ctx)


def test_tag_matching_scores_by_overlap(context_for, catalog):
    candidates = {c.product_id: c for c in _generate(StrategyName.TAG_MATCHING, context_for(143), catalog)}

    assert candidates[144].base_score == 40
    assert candidates[144].reason == "Shared tags (3): camera, mirrorless, professional"
    assert candidates[145].base_score == 30
    assert candidates[147].base_score == 20
    assert 3 in candidates  # professional
    assert 101 not in candidates


def test_price_range_overlap(context_for, catalog):
    candidates = _generate(StrategyName.PRICE_RANGE, context_for(101), catalog)
    assert [c.product_id for c in candidates] == [1, 2, 105, 149]
    pixel = next(c for c in candidates if c.product_id == 105)
    assert pixel.reason == "Similar price range: 699.00-799.00"


def test_zero_price_is_a_real_price(catalog_session, context_for, catalog):
    # 무료 샘플 변형 (가격 0)
    catalog_session.add_all([
        Product(id=170, seller_id=2, category_id=16, name="Sample Speaker", brand="Acme", base_sku="SAMPLE-170", tags=["sample"]),
        Product(id=171, seller_id=2, category_id=16, name="Sample Cable", brand="Acme", base_sku="SAMPLE-171", tags=["sample"]),
    ])
    catalog_session.flush()
    catalog_session.add_all([
        ProductVariant(product_id=170, sku="SAMPLE-170-FREE", price=0.0, allow_purchase=True),
        ProductVariant(product_id=171, sku="SAMPLE-171-FREE", price=0.0, allow_purchase=True),
        ProductVariant(product_id=171, sku="SAMPLE-171-PAID", price=9.99, allow_purchase=True),
    ])
    catalog_session.flush()

    summaries = catalog.variant_summaries(SELLER_2, [170, 171], Deadline.none())
    assert summaries[170].price_range == PriceRange(min=0.0, max=0.0)
    assert summaries[171].price_range == PriceRange(min=0.0, max=9.99)
    assert not summaries[170].out_of_stock

    ctx = context_for(170)
    assert ctx.price_range == PriceRange(min=0.0, max=0.0)
    assert STRATEGIES[StrategyName.PRICE_RANGE].can_apply_to(ctx)

    candidates = _generate(StrategyName.PRICE_RANGE, ctx, catalog)
    assert [c.product_id for c in candidates] == [171]
    assert candidates[0].reason == "Similar price range: 0.00-9.99"


def test_price_range_skipped_without_variants(context_for):
    assert not STRATEGIES[StrategyName.PRICE_RANGE].can_apply_to(context_for(103))


def test_seller_popular_newest_first(context_for, catalog):
    candidates = _generate(StrategyName.SELLER_POPULAR, context_for(101), catalog)
    ids = [c.product_id for c in candidates]

    assert len(ids) == 50
    assert ids[:8] == [1, 2, 3, 4, 151, 110, 112, 129]
    assert 101 not in ids
    assert all(c.base_score == 15 for c in candidates)


def test_category_ancestors_bounded_and_cycle_safe(catalog_session, catalog):
    assert [n.id for n in catalog.category_ancestors(SELLER_2, 17, Deadline.none())] == [17, 4, 1]

    shallow = CatalogRepository(catalog_session, max_category_depth=2)
    assert [n.id for n in shallow.category_ancestors(SELLER_2, 17, Deadline.none())] == [17, 4]

    catalog_session.add_all([
        Category(id=30, name="Loop A", parent_id=31, is_active=True),
        Category(id=31, name="Loop B", parent_id=30, is_active=True),
    ])
    catalog_session.flush()
    assert [n.id for n in catalog.category_ancestors(SELLER_2, 30, Deadline.none())] == [30, 31]


def test_variant_summaries_and_option_previews(catalog):
    summaries = catalog.variant_summaries(SELLER_2, [101, 149, 103], Deadline.none())
    assert 103 not in summaries
    assert summaries[101].total == 3
    assert (summaries[101].price_range.min, summaries[101].price_range.max) == (799.0, 899.0)
    assert summaries[149].out_of_stock
    assert summaries[149].price_range.min == 899.0

    previews = catalog.option_previews(SELLER_2, [1, 101], Deadline.none())
    iphone_15 = previews[1]
    assert [p.name for p in iphone_15] == ["Color", "Storage"]
    assert iphone_15[0].available_values == ("Natural Titanium", "Blue Titanium")
    assert iphone_15[1].available_values == ("128GB", "256GB")
    assert iphone_15[1].display_name == "Storage Capacity"
    assert previews[101][0].available_values == ("Black", "White")

    # 다른 판매자 상품은 조회되지 않음
    assert catalog.option_previews(SELLER_3, [1], Deadline.none()) == {}


def test_run_strategies_respects_selection(context_for, catalog):
    ctx = context_for(101)
    candidates = run_strategies(
        ctx,
        (StrategyName.SAME_CATEGORY, StrategyName.SAME_BRAND),
        catalog,
        SELLER_2,
        Deadline.none(),
    )
    assert {c.strategy for c in candidates} <= {StrategyName.SAME_CATEGORY, StrategyName.SAME_BRAND}
    assert all(c.product_id != 101 for c in candidates)
