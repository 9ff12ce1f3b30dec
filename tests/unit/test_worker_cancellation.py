"""
워커 스레드 실행과 취소 전파 테스트
"""
import time

import anyio
import pytest

from app.api.endpoints.products import run_in_worker
from app.services.related.exceptions import InvalidArgumentError, RequestCancelledError
from app.services.related.params import parse_related_request
from app.services.related.scope import Deadline

pytestmark = pytest.mark.unit

REQUEST = parse_related_request("2", "101")


def _slow_coordinator(record, seconds=2.0):
    """쿼리 사이마다 데드라인을 확인하는 느린 코디네이터"""
    def _run(request, deadline):
        started = time.monotonic()
        while time.monotonic() - started < seconds:
            if deadline.cancelled:
                record["cancelled_after"] = time.monotonic() - started
                deadline.check("slow_query")
            time.sleep(0.01)
        record["ran_full"] = time.monotonic() - started
        return "done"

    return _run


def test_cancelled_caller_stops_worker_at_next_check():
    record = {}
    deadline = Deadline.after(10)

    async def _caller():
        with anyio.move_on_after(0.2):
            try:
                await run_in_worker(_slow_coordinator(record), REQUEST, deadline)
            except RequestCancelledError:
                record["raised"] = True

    started = time.monotonic()
    anyio.run(_caller)
    elapsed = time.monotonic() - started

    assert deadline.cancelled
    assert "ran_full" not in record
    assert record["cancelled_after"] < 1.0
    assert elapsed < 1.0


def test_client_disconnect_cancels_worker():
    record = {}
    deadline = Deadline.after(10)
    polls = []

    async def _disconnected():
        polls.append(time.monotonic())
        return len(polls) >= 2

    with pytest.raises(RequestCancelledError):
        anyio.run(run_in_worker, _slow_coordinator(record), REQUEST, deadline, _disconnected)

    assert deadline.cancelled
    assert "ran_full" not in record
    assert record["cancelled_after"] < 1.0


def test_worker_result_and_errors_pass_through():
    deadline = Deadline.none()
    assert anyio.run(run_in_worker, lambda request, dl: request.product_id, REQUEST, deadline) == 101
    # 정상 종료 시에는 데드라인을 취소하지 않음
    assert not deadline.cancelled

    def _invalid(request, dl):
        raise InvalidArgumentError("Invalid strategy", field="strategies")

    with pytest.raises(InvalidArgumentError):
        anyio.run(run_in_worker, _invalid, REQUEST, Deadline.none())
