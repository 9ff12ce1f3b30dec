"""
Auth collaborator

Bearer 토큰 형식: "<subject>.<expires_epoch>.<hex hmac-sha256>"
서명 문자열은 "<subject>.<expires_epoch>" 이며 auth_token_secret으로 서명합니다.
"""
import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from fastapi import Depends, Header

from app.services.related.exceptions import UnauthorizedError
from app.settings import settings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class AuthPrincipal:
    subject: str
    expires_at: int


class TokenVerifier(Protocol):
    def verify(self, token: str) -> AuthPrincipal: ...


class HmacTokenVerifier:
    def __init__(self, secret: str, clock: Callable[[], float] = time.time):
        self._secret = secret.encode("utf-8")
        self._clock = clock

    def _sign(self, payload: str) -> str:
        return hmac.new(self._secret, payload.encode("utf-8"), hashlib.sha256).hexdigest()

    def issue(self, subject: str, ttl_seconds: int) -> str:
        if not subject or "." in subject:
            raise ValueError("subject는 비어 있거나 '.'을 포함할 수 없습니다")
        expires_at = int(self._clock()) + int(ttl_seconds)
        payload = f"{subject}.{expires_at}"
        return f"{payload}.{self._sign(payload)}"

    def verify(self, token: str) -> AuthPrincipal:
        parts = (token or "").strip().split(".")
        if len(parts) != 3:
            raise UnauthorizedError()
        subject, expires_raw, signature = parts
        if not subject or not expires_raw.isdigit():
            raise UnauthorizedError()

        expected = self._sign(f"{subject}.{expires_raw}")
        if not hmac.compare_digest(expected, signature.lower()):
            raise UnauthorizedError()

        expires_at = int(expires_raw)
        if expires_at <= int(self._clock()):
            raise UnauthorizedError("Token expired")
        return AuthPrincipal(subject=subject, expires_at=expires_at)


def issue_token(subject: str, secret: Optional[str] = None, ttl_seconds: Optional[int] = None) -> str:
    verifier = HmacTokenVerifier(secret if secret is not None else settings.auth_token_secret)
    return verifier.issue(subject, ttl_seconds if ttl_seconds is not None else settings.auth_token_ttl_seconds)


def get_token_verifier() -> TokenVerifier:
    return HmacTokenVerifier(settings.auth_token_secret)


def require_principal(
    authorization: Optional[str] = Header(default=None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> AuthPrincipal:
    """
    Authorization 헤더를 검증합니다. X-Seller-Id 및 파라미터 검증보다 먼저 실행됩니다.
    """
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        raise UnauthorizedError()
    token = authorization[len(BEARER_PREFIX):].strip()
    principal = verifier.verify(token)
    logger.debug(f"[Auth] authenticated subject={principal.subject}")
    return principal
