import argparse
import json
import logging
import sys

from app.auth import issue_token
from app.db import SessionLocal, engine
from app.demo_catalog import load_demo_catalog
from app.models import CatalogBase
from app.services.related.exceptions import RelatedProductsError
from app.services.related.params import parse_related_request
from app.services.related.scope import Deadline
from app.services.related.service import RelatedProductsService
from app.settings import settings

# 로그 설정
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger("app.cli")


def run_related_command(args) -> int:
    """관련 상품 한 페이지를 계산해 JSON으로 출력"""
    try:
        request = parse_related_request(
            args.seller_id,
            args.product_id,
            page=args.page,
            limit=args.limit,
            strategies=args.strategies,
            default_limit=settings.related_default_limit,
            max_limit=settings.related_max_limit,
        )
        with SessionLocal() as session, session.begin():
            service = RelatedProductsService(session)
            result = service.get_related(request, Deadline.after(settings.related_request_timeout_seconds))
    except RelatedProductsError as e:
        logger.error(f"[CLI] {e.error_code}: {e.message}")
        print(json.dumps(e.to_dict(), ensure_ascii=False))
        return 1

    print(json.dumps(result.model_dump(exclude_none=True), ensure_ascii=False, indent=2))
    return 0


def run_seed_demo_command(args) -> int:
    """테이블 생성 후 데모 카탈로그 적재"""
    CatalogBase.metadata.create_all(bind=engine)
    with SessionLocal() as session, session.begin():
        summary = load_demo_catalog(session)
    logger.info(f"[CLI] Demo catalog seeded: {summary}")
    return 0


def run_issue_token_command(args) -> int:
    token = issue_token(args.subject, ttl_seconds=args.ttl)
    print(token)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Catalog Related Products CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    related_parser = subparsers.add_parser("related", help="Compute related products for a product")
    related_parser.add_argument("--seller-id", required=True)
    related_parser.add_argument("--product-id", required=True)
    related_parser.add_argument("--page")
    related_parser.add_argument("--limit")
    related_parser.add_argument("--strategies", help="Comma separated strategy names or 'all'")
    related_parser.set_defaults(handler=run_related_command)

    seed_parser = subparsers.add_parser("seed-demo", help="Create tables and load the demo catalog")
    seed_parser.set_defaults(handler=run_seed_demo_command)

    token_parser = subparsers.add_parser("issue-token", help="Issue a bearer token")
    token_parser.add_argument("--subject", required=True)
    token_parser.add_argument("--ttl", type=int, default=None, help="Token lifetime in seconds")
    token_parser.set_defaults(handler=run_issue_token_command)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except Exception as e:
        logger.exception(f"[CLI] Critical error: {type(e).__name__}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
