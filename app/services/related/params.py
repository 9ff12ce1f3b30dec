"""
Parameter surface for GET /api/products/{id}/related

쿼리/헤더 원본 문자열을 검증된 값으로 변환합니다. 검증은 저장소 접근 전에 수행됩니다.
"""
import re
from dataclasses import dataclass

from app.services.related.constants import ALL_STRATEGIES_TOKEN, StrategyName
from app.services.related.exceptions import InvalidArgumentError
from app.services.related.scope import TenantScope

_DIGITS = re.compile(r"[0-9]+")
_SIGNED_INT = re.compile(r"[+-]?[0-9]+")

MAX_ID = 2**63 - 1  # BIGINT

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class RelatedQueryOptions:
    page: int
    limit: int
    strategies: tuple[StrategyName, ...]

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _parse_id(raw: str | None, field: str, message: str) -> int:
    if raw is None:
        raise InvalidArgumentError(message, field=field)
    value = raw.strip()
    if not _DIGITS.fullmatch(value):
        raise InvalidArgumentError(message, field=field, value=raw)
    parsed = int(value)
    if parsed <= 0 or parsed > MAX_ID:
        raise InvalidArgumentError(message, field=field, value=raw)
    return parsed


def parse_product_id(raw: str | None) -> int:
    return _parse_id(raw, "productId", "Invalid product ID")


def parse_seller_id(raw: str | None) -> int:
    if raw is None or not raw.strip():
        raise InvalidArgumentError("Seller ID is required", field="X-Seller-Id")
    return _parse_id(raw, "X-Seller-Id", "Invalid seller ID")


def _parse_int(raw: str, field: str, message: str) -> int:
    value = raw.strip()
    if not _SIGNED_INT.fullmatch(value):
        raise InvalidArgumentError(message, field=field, value=raw)
    return int(value)


def parse_page(raw: str | None) -> int:
    if raw is None:
        return DEFAULT_PAGE
    page = _parse_int(raw, "page", "Page must be a positive integer")
    if page < 1:
        raise InvalidArgumentError("Page must be a positive integer", field="page", value=raw)
    return page


def parse_limit(raw: str | None, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    message = f"Limit must be between 1 and {maximum}"
    if raw is None:
        return default
    limit = _parse_int(raw, "limit", message)
    if limit < 1 or limit > maximum:
        raise InvalidArgumentError(message, field="limit", value=raw)
    return limit


def parse_strategies(raw: str | None) -> tuple[StrategyName, ...]:
    """
    콤마로 구분된 전략 목록을 파싱합니다.

    'all'이 포함되면 8개 전략 전체로 확장됩니다. 결과는 우선순위 순서이며 중복은 제거됩니다.
    """
    if raw is None:
        return tuple(StrategyName)

    requested: set[StrategyName] = set()
    expand_all = False
    for token in raw.split(","):
        name = token.strip()
        if name == ALL_STRATEGIES_TOKEN:
            expand_all = True
            continue
        try:
            requested.add(StrategyName(name))
        except ValueError:
            raise InvalidArgumentError("Invalid strategy", field="strategies", value=name) from None

    if expand_all:
        return tuple(StrategyName)
    return tuple(name for name in StrategyName if name in requested)


def parse_related_options(
    page: str | None,
    limit: str | None,
    strategies: str | None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> RelatedQueryOptions:
    return RelatedQueryOptions(
        page=parse_page(page),
        limit=parse_limit(limit, default=default_limit, maximum=max_limit),
        strategies=parse_strategies(strategies),
    )


@dataclass(frozen=True)
class RelatedRequest:
    scope: TenantScope
    product_id: int
    options: RelatedQueryOptions


def parse_related_request(
    seller_id: str | None,
    product_id: str | None,
    page: str | None = None,
    limit: str | None = None,
    strategies: str | None = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> RelatedRequest:
    """X-Seller-Id → 상품 id → page/limit/strategies 순으로 검증합니다."""
    scope = TenantScope(parse_seller_id(seller_id))
    return RelatedRequest(
        scope=scope,
        product_id=parse_product_id(product_id),
        options=parse_related_options(page, limit, strategies, default_limit=default_limit, max_limit=max_limit),
    )
