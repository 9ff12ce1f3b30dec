import pytest

from app.auth import HmacTokenVerifier, issue_token, require_principal
from app.services.related.exceptions import UnauthorizedError

pytestmark = pytest.mark.unit

SECRET = "unit-test-secret"


class FixedClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_issue_and_verify_roundtrip():
    clock = FixedClock(1_700_000_000)
    verifier = HmacTokenVerifier(SECRET, clock=clock)
    token = verifier.issue("ops", ttl_seconds=60)

    principal = verifier.verify(token)
    assert principal.subject == "ops"
    assert principal.expires_at == 1_700_000_060


def test_expired_token_rejected():
    clock = FixedClock(1_700_000_000)
    verifier = HmacTokenVerifier(SECRET, clock=clock)
    token = verifier.issue("ops", ttl_seconds=60)

    clock.now += 61
    with pytest.raises(UnauthorizedError) as excinfo:
        verifier.verify(token)
    assert excinfo.value.status_code == 401


@pytest.mark.parametrize("token", ["", "garbage", "ops.123", "ops.abc.deadbeef", ".123.abcd", "a.b.c.d"])
def test_malformed_tokens_rejected(token):
    with pytest.raises(UnauthorizedError):
        HmacTokenVerifier(SECRET).verify(token)


def test_token_signed_with_other_secret_rejected():
    token = issue_token("ops", secret="another-secret", ttl_seconds=60)
    with pytest.raises(UnauthorizedError):
        HmacTokenVerifier(SECRET).verify(token)


def test_tampered_subject_rejected():
    token = issue_token("ops", secret=SECRET, ttl_seconds=60)
    _, expires, signature = token.split(".")
    with pytest.raises(UnauthorizedError):
        HmacTokenVerifier(SECRET).verify(f"admin.{expires}.{signature}")


@pytest.mark.parametrize("subject", ["", "a.b"])
def test_issue_rejects_bad_subject(subject):
    with pytest.raises(ValueError):
        HmacTokenVerifier(SECRET).issue(subject, 60)


def test_require_principal_reads_bearer_header():
    verifier = HmacTokenVerifier(SECRET)
    token = verifier.issue("ops", 60)

    principal = require_principal(authorization=f"Bearer {token}", verifier=verifier)
    assert principal.subject == "ops"

    with pytest.raises(UnauthorizedError):
        require_principal(authorization=None, verifier=verifier)
    with pytest.raises(UnauthorizedError):
        require_principal(authorization=f"Token {token}", verifier=verifier)
