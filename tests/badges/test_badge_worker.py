from __future__ import annotations

import asyncio
import random
from datetime import timedelta

import httpx
import pytest

from src.attendance_badges.attendance_badges.badges.generation import BadgeImageGenerator
from src.attendance_badges.attendance_badges.badges.worker import BadgeFulfillmentWorker
from src.attendance_badges.attendance_badges.core.enums import BadgeStatus
from tests.fakes import FixedClock, InMemoryBadges, InMemoryStorage, make_job

PROMPT = "A cohesive art piece inspired by: robot robot robot robot robot"


class StubWords:
    def __init__(self):
        self.calls = 0

    def get_word_list(self):
        self.calls += 1
        return ["robot"]


class Recorder:
    """MockTransport handler; ``fail_first`` requests get a JSON error envelope."""

    def __init__(self, fail_first: int = 0):
        self.requests: list[httpx.Request] = []
        self.fail_first = fail_first

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.requests) <= self.fail_first:
            return httpx.Response(200, json={"success": False, "error": "quota"})
        return httpx.Response(200, content=b"\xff\xd8jpeg", headers={"content-type": "image/jpeg"})


@pytest.fixture
def clock(fixed_now):
    return FixedClock(fixed_now)


def _worker(badges, clock, recorder, *, api_key="k", storage=None, words=None, client_factory=None):
    generator = BadgeImageGenerator(
        endpoint="https://img.example/prompt/", model="nanobanana", width=1024, height=1024, api_key=api_key
    )
    factory = client_factory or (lambda: httpx.AsyncClient(transport=httpx.MockTransport(recorder)))
    return BadgeFulfillmentWorker(
        badges,
        words or StubWords(),
        generator,
        storage if storage is not None else InMemoryStorage(),
        rng=random.Random(3),
        claim_timeout_seconds=600,
        clock=clock,
        client_factory=factory,
    )


def _pending(fixed_now, count):
    return InMemoryBadges(*(make_job(f"B-1-{i:03d}", fixed_now, meeting_id=f"m_{i}") for i in range(count)))


def test_empty_queue_makes_no_external_calls(fixed_now, clock):
    badges = InMemoryBadges(make_job("B-1-AAA", fixed_now, status=BadgeStatus.READY))
    recorder, words = Recorder(), StubWords()
    before = dict(badges.jobs)

    summary = _worker(badges, clock, recorder, words=words).process_pending_badges()

    assert summary.claimed == 0
    assert recorder.requests == []
    assert words.calls == 0
    assert badges.jobs == before


def test_all_jobs_become_ready_with_prompt_and_public_artifact(fixed_now, clock):
    badges = _pending(fixed_now, 3)
    storage = InMemoryStorage()
    recorder = Recorder()

    summary = _worker(badges, clock, recorder, storage=storage).process_pending_badges()

    assert (summary.claimed, summary.ready, summary.failed) == (3, 3, 0)
    assert len(recorder.requests) == 3
    for job in badges.jobs.values():
        assert job.status == BadgeStatus.READY
        assert job.prompt == PROMPT
        assert job.artifact_url == f"https://files.example/{job.badge_id}.jpg"
    assert storage.public == {f"B-1-{i:03d}.jpg" for i in range(3)}

    request = recorder.requests[0]
    assert request.headers["authorization"] == "Bearer k"
    assert request.url.params["model"] == "nanobanana"
    assert request.url.params["width"] == "1024"
    assert request.url.params["nologo"] == "true"
    assert request.url.params["private"] == "true"


def test_one_api_error_does_not_affect_siblings(fixed_now, clock):
    badges = _pending(fixed_now, 3)

    summary = _worker(badges, clock, Recorder(fail_first=1)).process_pending_badges()

    assert (summary.ready, summary.failed) == (2, 1)
    statuses = sorted(j.status.value for j in badges.jobs.values())
    assert statuses == ["error", "ready", "ready"]
    errored = next(j for j in badges.jobs.values() if j.status == BadgeStatus.ERROR)
    assert errored.prompt == PROMPT
    assert errored.artifact_url == ""


def test_storage_failure_isolated_to_its_item(fixed_now, clock):
    badges = _pending(fixed_now, 2)
    storage = InMemoryStorage(fail_for=("B-1-001",))

    summary = _worker(badges, clock, Recorder(), storage=storage).process_pending_badges()

    assert (summary.ready, summary.failed) == (1, 1)
    assert badges.get_by_id("B-1-000").status == BadgeStatus.READY
    assert badges.get_by_id("B-1-001").status == BadgeStatus.ERROR


def test_http_error_status_marks_error(fixed_now, clock):
    badges = _pending(fixed_now, 1)

    def handler(request):
        return httpx.Response(500, text="boom")

    worker = _worker(badges, clock, None, client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    summary = worker.process_pending_badges()

    assert summary.failed == 1
    assert badges.get_by_id("B-1-000").status == BadgeStatus.ERROR


def test_missing_api_key_leaves_jobs_pending(fixed_now, clock):
    badges = _pending(fixed_now, 2)
    recorder = Recorder()

    summary = _worker(badges, clock, recorder, api_key=None).process_pending_badges()

    assert summary.claimed == 0
    assert recorder.requests == []
    assert all(j.status == BadgeStatus.PENDING for j in badges.jobs.values())


def test_dispatch_failure_releases_claim_back_to_pending(fixed_now, clock):
    badges = _pending(fixed_now, 2)

    def broken_client():
        raise RuntimeError("no sockets")

    summary = _worker(badges, clock, Recorder(), client_factory=broken_client).process_pending_badges()

    assert (summary.claimed, summary.released) == (2, 2)
    for job in badges.jobs.values():
        assert job.status == BadgeStatus.PENDING
        assert job.claim_token is None


def test_unreachable_endpoint_leaves_every_job_pending(fixed_now, clock):
    badges = _pending(fixed_now, 3)

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    worker = _worker(badges, clock, None, client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    summary = worker.process_pending_badges()

    assert (summary.claimed, summary.ready, summary.failed, summary.released) == (3, 0, 0, 3)
    for job in badges.jobs.values():
        assert job.status == BadgeStatus.PENDING
        assert job.claim_token is None


def test_timed_out_request_goes_back_to_pending_while_siblings_finish(fixed_now, clock):
    badges = _pending(fixed_now, 3)

    seen: list[httpx.Request] = []

    def handler(request):
        seen.append(request)
        if len(seen) > 1:
            return httpx.Response(200, content=b"\xff\xd8jpeg", headers={"content-type": "image/jpeg"})
        raise httpx.ReadTimeout("slow upstream", request=request)

    worker = _worker(badges, clock, None, client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    summary = worker.process_pending_badges()

    assert (summary.ready, summary.failed, summary.released) == (2, 0, 1)
    statuses = sorted(j.status.value for j in badges.jobs.values())
    assert statuses == ["pending", "ready", "ready"]


def test_word_list_failure_releases_claim(fixed_now, clock):
    badges = _pending(fixed_now, 2)
    recorder = Recorder()

    class BrokenWords:
        def get_word_list(self):
            raise RuntimeError("cache exploded")

    summary = _worker(badges, clock, recorder, words=BrokenWords()).process_pending_badges()

    assert (summary.claimed, summary.released) == (2, 2)
    assert recorder.requests == []
    assert all(j.status == BadgeStatus.PENDING for j in badges.jobs.values())


def test_all_requests_are_in_flight_before_any_response(fixed_now, clock):
    badges = _pending(fixed_now, 3)
    arrived: list[httpx.Request] = []
    all_arrived = asyncio.Event()

    async def handler(request):
        arrived.append(request)
        if len(arrived) == 3:
            all_arrived.set()
        # Requests sent one after another would never get past this.
        await asyncio.wait_for(all_arrived.wait(), timeout=2)
        return httpx.Response(200, content=b"\xff\xd8jpeg", headers={"content-type": "image/jpeg"})

    worker = _worker(badges, clock, None, client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    summary = worker.process_pending_badges()

    assert len(arrived) == 3
    assert (summary.ready, summary.failed) == (3, 0)


def test_claimed_jobs_are_invisible_to_a_second_run(fixed_now, clock):
    badges = _pending(fixed_now, 1)
    badges.claim(claim_token="other-run", claimed_at=fixed_now, stale_before=fixed_now - timedelta(minutes=10))
    recorder = Recorder()

    summary = _worker(badges, clock, recorder).process_pending_badges()

    assert summary.claimed == 0
    assert recorder.requests == []
    assert badges.get_by_id("B-1-000").claim_token == "other-run"


def test_stale_claim_is_taken_over(fixed_now, clock):
    badges = _pending(fixed_now, 1)
    badges.claim(
        claim_token="crashed-run",
        claimed_at=fixed_now - timedelta(minutes=11),
        stale_before=fixed_now,
    )

    summary = _worker(badges, clock, Recorder()).process_pending_badges()

    assert summary.ready == 1
    assert badges.get_by_id("B-1-000").status == BadgeStatus.READY
