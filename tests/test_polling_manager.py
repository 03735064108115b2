import httpx
import pytest

from autograder.exceptions import ExecutionTimeoutError, SubmissionError
from autograder.managers.polling_manager import parse_verdict
from autograder.models.results import SubmissionHandle, VerdictStatus

from datetime import datetime, timezone

from tests.conftest import judge0_body


@pytest.fixture
def handle():
    return SubmissionHandle(token="tok-1", submitted_at=datetime.now(timezone.utc))


@pytest.mark.asyncio
async def test_polls_until_terminal(polling_manager, fake_services, handle):
    fake_services.poll_responses = [
        (200, judge0_body(1, "In Queue")),
        (200, judge0_body(2, "Processing")),
        (200, judge0_body(2, "Processing")),
        (200, judge0_body(3, "Accepted", stdout="1\n", exit_code=0, time="0.012", memory=3264)),
    ]

    verdict = await polling_manager.wait_for_completion(handle, deadline_seconds=5)

    assert verdict.status is VerdictStatus.ACCEPTED
    assert verdict.stdout == "1\n"
    assert verdict.exit_code == 0
    assert verdict.time_ms == 12.0
    assert verdict.memory_kb == 3264
    assert len(fake_services.engine_calls) == 4
    assert all(r.url.path == "/submissions/tok-1" for r in fake_services.engine_calls)


@pytest.mark.asyncio
async def test_deadline_raises_timeout(polling_manager, fake_services, handle):
    fake_services.poll_responses = [(200, judge0_body(2, "Processing"))]

    with pytest.raises(ExecutionTimeoutError) as exc_info:
        await polling_manager.wait_for_completion(handle, deadline_seconds=0.05)

    assert isinstance(exc_info.value, TimeoutError)
    assert exc_info.value.code == "timeout"


@pytest.mark.asyncio
async def test_zero_deadline_times_out_without_polling(polling_manager, fake_services, handle):
    with pytest.raises(ExecutionTimeoutError):
        await polling_manager.wait_for_completion(handle, deadline_seconds=0)

    assert fake_services.requests == []


@pytest.mark.asyncio
async def test_transient_poll_failures_are_retried(polling_manager, fake_services, handle):
    fake_services.poll_responses = [
        httpx.ReadTimeout,
        (502, {}),
        (200, judge0_body(6, "Compilation Error", compile_output="SyntaxError")),
    ]

    verdict = await polling_manager.wait_for_completion(handle, deadline_seconds=5)

    assert verdict.status is VerdictStatus.COMPILE_ERROR
    assert verdict.compile_output == "SyntaxError"


@pytest.mark.asyncio
async def test_repeated_poll_failures_escalate(polling_manager, fake_services, handle):
    fake_services.poll_responses = [httpx.ConnectError]

    with pytest.raises(SubmissionError):
        await polling_manager.wait_for_completion(handle, deadline_seconds=5)

    assert len(fake_services.engine_calls) == 3


@pytest.mark.parametrize("status_id,expected", [
    (3, VerdictStatus.ACCEPTED),
    (4, VerdictStatus.WRONG_ANSWER),
    (5, VerdictStatus.TIME_LIMIT_EXCEEDED),
    (6, VerdictStatus.COMPILE_ERROR),
    (7, VerdictStatus.RUNTIME_ERROR),
    (11, VerdictStatus.RUNTIME_ERROR),
    (12, VerdictStatus.RUNTIME_ERROR),
    (13, VerdictStatus.INTERNAL_ERROR),
    (14, VerdictStatus.INTERNAL_ERROR),
    (1, VerdictStatus.PENDING),
    (2, VerdictStatus.PENDING),
])
def test_parse_verdict_status_mapping(status_id, expected):
    assert parse_verdict(judge0_body(status_id)).status is expected


def test_parse_verdict_unknown_status_is_internal_error():
    verdict = parse_verdict({"status": {"id": 99, "description": "???"}})

    assert verdict.status is VerdictStatus.INTERNAL_ERROR
    assert verdict.status.is_terminal


def test_parse_verdict_tolerates_garbage_numbers():
    verdict = parse_verdict(judge0_body(3, time="n/a", memory="lots", exit_code=None))

    assert verdict.time_ms is None
    assert verdict.memory_kb is None


def test_parse_verdict_coerces_output_to_text():
    body = judge0_body(3, "Accepted", stdout=1, stderr=False, compile_output={"unexpected": "object"})
    body["status"]["description"] = 3

    verdict = parse_verdict(body)

    assert verdict.stdout == "1"
    assert verdict.stderr == "False"
    assert verdict.compile_output is None
    assert verdict.status_description == "3"
