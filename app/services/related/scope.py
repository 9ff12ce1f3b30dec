"""
Tenant scope and request deadline

모든 카탈로그 접근자는 TenantScope를 첫 번째 인자로 받습니다.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from app.services.related.exceptions import RequestCancelledError


@dataclass(frozen=True)
class TenantScope:
    seller_id: int

    def __post_init__(self) -> None:
        if isinstance(self.seller_id, bool) or not isinstance(self.seller_id, int):
            raise TypeError("TenantScope.seller_id must be an int")
        if self.seller_id <= 0:
            raise ValueError("TenantScope.seller_id must be positive")


def require_scope(scope: object) -> TenantScope:
    """TenantScope 없이 접근자를 호출하면 즉시 실패합니다."""
    if not isinstance(scope, TenantScope):
        raise TypeError(f"TenantScope required, got {type(scope).__name__}")
    return scope


@dataclass
class Deadline:
    """
    요청 단위 데드라인.

    monotonic 만료 시각과 취소 플래그를 함께 가지며, 워커 스레드와
    요청 처리 태스크 사이에서 공유됩니다.
    """

    expires_at: float | None = None
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)

    @classmethod
    def after(cls, seconds: float | None) -> "Deadline":
        if seconds is None:
            return cls()
        return cls(expires_at=time.monotonic() + seconds)

    @classmethod
    def none(cls) -> "Deadline":
        return cls()

    def remaining(self) -> float | None:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        if self.cancelled:
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, operation: str | None = None) -> None:
        if self.expired:
            raise RequestCancelledError(operation)
