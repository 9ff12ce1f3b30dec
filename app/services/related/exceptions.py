"""
Related Products Exception Classes

도메인 에러 → 전송 계층 상태 코드 매핑을 위한 예외 클래스 정의
"""
from typing import Any, Dict, Optional


INTERNAL_ERROR_MESSAGE = "Failed to get related products"


class RelatedProductsError(Exception):
    """
    Base exception for the related products subsystem

    Attributes:
        message: 클라이언트에게 노출되는 짧은 메시지
        error_code: UPPER_SNAKE 에러 코드
        status_code: HTTP 상태 코드
        context: 로그용 추가 정보 (응답에는 포함되지 않음)
    """

    status_code: int = 500
    default_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_code
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, str]:
        """응답 본문 형태로 변환 (내부 정보 제외)"""
        return {"error": self.message, "code": self.error_code}


class InvalidArgumentError(RelatedProductsError):
    """잘못된 id, page/limit, 알 수 없는 전략, X-Seller-Id 누락"""

    status_code = 400
    default_code = "INVALID_ARGUMENT"

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None):
        super().__init__(
            message,
            context={"field": field, "value": str(value) if value is not None else None},
        )
        self.field = field


class UnauthorizedError(RelatedProductsError):
    status_code = 401
    default_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(message)


class ProductNotFoundError(RelatedProductsError):
    """
    상품이 없거나 다른 판매자 소유인 경우.
    두 경우는 호출자에게 구분되지 않습니다.
    """

    status_code = 404
    default_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        super().__init__("Product not found", context={"product_id": product_id})
        self.product_id = product_id


class RequestCancelledError(RelatedProductsError):
    """데드라인 만료 또는 클라이언트 연결 종료"""

    status_code = 499
    default_code = "REQUEST_CANCELLED"

    def __init__(self, operation: Optional[str] = None):
        super().__init__("Request cancelled", context={"operation": operation})
        self.operation = operation


class InternalError(RelatedProductsError):
    """저장소/보강 실패. 메시지는 고정 상수입니다."""

    status_code = 500
    default_code = "INTERNAL_ERROR"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(INTERNAL_ERROR_MESSAGE, context=context)


class CatalogQueryError(Exception):
    """
    카탈로그 접근자 쿼리 실패. 조정자(coordinator)가 InternalError로 변환합니다.
    """

    def __init__(self, operation: str, error: Exception):
        super().__init__(f"Catalog query failed: {operation}")
        self.operation = operation
        self.error_type = type(error).__name__
