"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import JSON, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import issue_token
from app.db import get_session
from app.demo_catalog import load_demo_catalog
from app.models import CatalogBase


# 테스트용 메모리 SQLite 엔진
# StaticPool: 워커 스레드와 테스트 코드가 같은 메모리 DB를 보도록 커넥션 하나를 공유
TEST_DATABASE_URL = "sqlite://"

test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False  # 테스트 로그 줄이기
)

TestSessionLocal = sessionmaker(
    bind=test_engine,
    autoflush=False,
    expire_on_commit=False,
)

TEST_TOKEN_SUBJECT = "pytest"


def _patch_jsonb_to_json(base):
    """
    SQLite에서 JSONB를 JSON으로 변경하여 컴파일 오류 방지.
    테스트용으로만 사용.
    """
    from sqlalchemy.dialects.postgresql import JSONB

    for table in base.metadata.sorted_tables:
        for column in table.columns:
            if isinstance(column.type, JSONB):
                # JSONB → JSON으로 변경 (SQLite 호환)
                column.type = JSON()


@pytest.fixture(scope="function")
def test_session() -> Session:
    """
    테스트용 데이터베이스 세션 fixture.
    각 테스트마다 새로운 메모리 DB 생성.
    """
    _patch_jsonb_to_json(CatalogBase)
    CatalogBase.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
        session.commit()  # 테스트 성공 시 commit
    except Exception:
        session.rollback()  # 실패 시 rollback
        raise
    finally:
        session.close()
        # 모든 테이블 삭제
        CatalogBase.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def catalog_session(test_session: Session) -> Session:
    """데모 카탈로그가 적재된 세션"""
    load_demo_catalog(test_session)
    test_session.commit()
    yield test_session


@pytest.fixture(scope="function")
def client(catalog_session: Session):
    """
    get_session 의존성을 테스트 엔진으로 교체한 TestClient.
    """
    from app.main import app

    def _override_get_session():
        session = TestSessionLocal()
        try:
            with session.begin():
                yield session
        finally:
            session.close()

    app.dependency_overrides[get_session] = _override_get_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """
    판매자 id별 요청 헤더 생성기. seller_id=None이면 X-Seller-Id를 생략합니다.
    """
    def _headers(seller_id=2, token=True):
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {issue_token(TEST_TOKEN_SUBJECT)}"
        if seller_id is not None:
            headers["X-Seller-Id"] = str(seller_id)
        return headers

    return _headers


# 테스트 마커 정의
def pytest_configure(config):
    """Pytest 마커 등록."""
    config.addinivalue_line("markers", "unit: 단위 테스트 (DB 불필요)")
    config.addinivalue_line("markers", "integration: 통합 테스트 (테스트 DB/API 필요)")
    config.addinivalue_line("markers", "slow: 느린 테스트 (> 1분)")
