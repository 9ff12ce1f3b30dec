"""
Related products constants

전략 이름, 기본 점수, 우선순위 및 보너스/패널티 값.
"""
from enum import Enum


class StrategyName(str, Enum):
    """후보 생성 전략 (우선순위 순서로 선언)"""
    SAME_CATEGORY = "same_category"
    SAME_BRAND = "same_brand"
    SIBLING_CATEGORY = "sibling_category"
    PARENT_CATEGORY = "parent_category"
    CHILD_CATEGORY = "child_category"
    TAG_MATCHING = "tag_matching"
    PRICE_RANGE = "price_range"
    SELLER_POPULAR = "seller_popular"


ALL_STRATEGIES_TOKEN = "all"

# 동점일 때의 고정 우선순위 (작을수록 우선)
STRATEGY_PRIORITY: dict[StrategyName, int] = {name: index for index, name in enumerate(StrategyName)}

TOTAL_STRATEGIES = len(StrategyName)

BASE_SCORES: dict[StrategyName, int] = {
    StrategyName.SAME_CATEGORY: 100,
    StrategyName.SAME_BRAND: 80,
    StrategyName.SIBLING_CATEGORY: 70,
    StrategyName.PARENT_CATEGORY: 60,
    StrategyName.CHILD_CATEGORY: 50,
    StrategyName.TAG_MATCHING: 20,
    StrategyName.PRICE_RANGE: 20,
    StrategyName.SELLER_POPULAR: 15,
}

# tag_matching: 20 + 10 * (overlap - 1), 상한 60
TAG_MATCH_STEP = 10
TAG_MATCH_MAX_SCORE = 60

# price_range: 원본 중간가 기준 ±25%
PRICE_BAND_LOWER_RATIO = 0.75
PRICE_BAND_UPPER_RATIO = 1.25

MULTI_STRATEGY_BONUS = 10
BRAND_CATEGORY_BONUS = 50
TAG_OVERLAP_BONUS_PER_TAG = 5
TAG_OVERLAP_BONUS_CAP = 25
TAG_OVERLAP_BONUS_MIN_OVERLAP = 2
OUT_OF_STOCK_PENALTY = 50

MIN_FINAL_SCORE = 1
