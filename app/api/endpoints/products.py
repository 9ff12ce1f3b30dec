import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar

import anyio
from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.orm import Session

from app.auth import AuthPrincipal, require_principal
from app.db import get_session
from app.schemas.related import ErrorResponse, RelatedProductsResponse
from app.services.related.params import RelatedRequest, parse_related_request
from app.services.related.scope import Deadline
from app.services.related.service import RelatedProductsService
from app.settings import settings

router = APIRouter()

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.1

T = TypeVar("T")


async def run_in_worker(
    func: Callable[[RelatedRequest, Deadline], T],
    request: RelatedRequest,
    deadline: Deadline,
    is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
) -> T:
    """
    동기 코디네이터를 워커 스레드에서 실행합니다.

    호출 태스크가 취소되거나 클라이언트 연결이 끊기면 감시 태스크가 데드라인을 취소합니다.
    워커는 다음 쿼리 전 deadline.check()에서 멈추고, 세션을 쓰는 워커가 끝날 때까지 여기서 기다립니다.
    """
    outcome: dict = {}

    async with anyio.create_task_group() as tg:

        async def _worker() -> None:
            try:
                outcome["result"] = await anyio.to_thread.run_sync(func, request, deadline)
            except Exception as e:
                # 태스크 그룹 밖에서 원래 예외 그대로 다시 발생 (ExceptionGroup 방지)
                outcome["error"] = e
            finally:
                outcome["done"] = True
                tg.cancel_scope.cancel()

        async def _watch() -> None:
            try:
                if is_disconnected is None:
                    await anyio.sleep_forever()
                while not await is_disconnected():
                    await anyio.sleep(DISCONNECT_POLL_SECONDS)
                logger.info(f"[RelatedProducts] client disconnected product_id={request.product_id}")
            finally:
                if not outcome.get("done"):
                    deadline.cancel()

        tg.start_soon(_worker)
        tg.start_soon(_watch)

    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]


@router.get(
    "/{product_id}/related",
    response_model=RelatedProductsResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def get_related_products(
    product_id: str,
    http_request: Request,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    strategies: str | None = Query(default=None),
    x_seller_id: str | None = Header(default=None, alias="X-Seller-Id"),
    principal: AuthPrincipal = Depends(require_principal),
    session: Session = Depends(get_session),
):
    """
    원본 상품과 관련된 같은 판매자의 상품을 점수 순으로 페이지 단위 반환합니다.

    page/limit/strategies는 문자열로 받아 직접 검증합니다 (오류 코드 INVALID_ARGUMENT 통일).
    """
    started = time.perf_counter()
    request = parse_related_request(
        x_seller_id,
        product_id,
        page=page,
        limit=limit,
        strategies=strategies,
        default_limit=settings.related_default_limit,
        max_limit=settings.related_max_limit,
    )
    logger.info(
        f"[RelatedProducts] request subject={principal.subject} seller_id={request.scope.seller_id} "
        f"product_id={request.product_id} page={request.options.page} limit={request.options.limit} "
        f"strategies={','.join(s.value for s in request.options.strategies)}"
    )

    deadline = Deadline.after(settings.related_request_timeout_seconds)
    service = RelatedProductsService(session)
    try:
        # 동기 SQLAlchemy 세션을 사용하므로 워커 스레드에서 실행
        result = await run_in_worker(service.get_related, request, deadline, http_request.is_disconnected)
    except anyio.get_cancelled_exc_class():
        logger.info(f"[RelatedProducts] request cancelled product_id={request.product_id}")
        raise

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"[RelatedProducts] completed product_id={request.product_id} "
        f"items={len(result.relatedProducts)} total={result.pagination.totalItems} elapsed_ms={elapsed_ms:.1f}"
    )
    return result
