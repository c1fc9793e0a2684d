"""
Unit tests for the polling screener.
"""

from unittest.mock import Mock, patch

import httpx
import pytest

from devportal.handlers.utils.errors import UpstreamCallError
from devportal.logic.screening import ScreeningConfig, run_auto_screening, screen
from devportal.models.screening import ScreeningJob, SubmissionResult


class FakeClock:
    """Clock whose sleep only advances virtual time."""

    def __init__(self):
        self.current = 1000.0
        self.sleeps = []

    def now(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds


def pending_job():
    return ScreeningJob(transaction_id="tx-1", screening_status="PENDING", report_generation_complete=False)


def complete_job(severity="LOW"):
    return ScreeningJob(
        transaction_id="tx-1",
        screening_status="COMPLETE",
        report_generation_complete=True,
        overall_severity=severity,
    )


def submit_ok():
    return SubmissionResult(transaction_id="tx-1")


class TestScreeningJob:
    """Terminal state detection."""

    def test_pending_is_not_complete(self):
        assert not pending_job().is_complete

    def test_report_still_generating_is_not_complete(self):
        job = ScreeningJob(screening_status="COMPLETE", report_generation_complete=False)
        assert not job.is_complete

    def test_pending_with_report_flag_is_not_complete(self):
        job = ScreeningJob(screening_status="PENDING", report_generation_complete=True)
        assert not job.is_complete

    def test_complete(self):
        assert complete_job().is_complete

    def test_null_report_flag_is_not_complete(self):
        job = ScreeningJob.model_validate(
            {"screening_status": "COMPLETE", "report_generation_complete": None, "overall_severity": None}
        )
        assert not job.is_complete


class TestScreen:
    """Polling loop behaviour."""

    def test_returns_severity_of_completed_job(self):
        clock = FakeClock()
        poll = Mock(side_effect=[pending_job(), pending_job(), complete_job("HIGH")])

        result = screen("9321483", submit_ok, poll, clock=clock, config=ScreeningConfig())

        assert result.overall_severity == "HIGH"
        assert result.transaction_id == "tx-1"
        assert poll.call_count == 3
        poll.assert_called_with("tx-1")
        # initial delay, then one interval after each unfinished poll
        assert clock.sleeps == [5.0, 5.0, 5.0]

    def test_waits_initial_delay_before_first_poll(self):
        clock = FakeClock()
        seen_at = []

        def poll(transaction_id):
            seen_at.append(clock.now())
            return complete_job()

        screen("9321483", submit_ok, poll, clock=clock, config=ScreeningConfig(initial_delay_seconds=7.0))

        assert seen_at == [1007.0]

    def test_times_out_with_error_severity(self):
        clock = FakeClock()
        poll = Mock(return_value=pending_job())
        config = ScreeningConfig(initial_delay_seconds=5.0, poll_interval_seconds=5.0, timeout_seconds=20.0)
        start = clock.current

        result = screen("9321483", submit_ok, poll, clock=clock, config=config)

        assert result.overall_severity == "ERROR"
        assert result.transaction_id == "tx-1"
        assert poll.call_count == config.max_polls == 4
        assert clock.current - (start + config.initial_delay_seconds) <= config.timeout_seconds + config.poll_interval_seconds

    def test_budget_is_checked_before_each_poll(self):
        clock = FakeClock()
        config = ScreeningConfig(initial_delay_seconds=5.0, poll_interval_seconds=5.0, timeout_seconds=20.0)

        def slow_poll(transaction_id):
            clock.current += 8.0
            return pending_job()

        poll = Mock(side_effect=slow_poll)
        start = clock.current

        result = screen("9321483", submit_ok, poll, clock=clock, config=config)

        assert result.overall_severity == "ERROR"
        # polls start at +0 and +13; the one that would start at +26 is never issued
        assert poll.call_count == 2
        assert clock.current - (start + config.initial_delay_seconds) == 26.0

    def test_default_budget_allows_sixty_polls(self):
        clock = FakeClock()
        poll = Mock(return_value=pending_job())

        result = screen("9321483", submit_ok, poll, clock=clock)

        assert result.overall_severity == "ERROR"
        assert poll.call_count == 60

    def test_empty_status_counts_as_pending(self):
        clock = FakeClock()
        poll = Mock(side_effect=[None, None, complete_job("MEDIUM")])

        result = screen("9321483", submit_ok, poll, clock=clock)

        assert result.overall_severity == "MEDIUM"
        assert poll.call_count == 3

    def test_completed_job_without_severity_reports_error(self):
        clock = FakeClock()
        poll = Mock(return_value=complete_job(severity=None))

        result = screen("9321483", submit_ok, poll, clock=clock)

        assert result.overall_severity == "ERROR"

    def test_submission_failure_propagates_without_polling(self):
        clock = FakeClock()
        submit = Mock(side_effect=UpstreamCallError("rejected", status_code=401))
        poll = Mock()

        with pytest.raises(UpstreamCallError):
            screen("9321483", submit, poll, clock=clock)

        poll.assert_not_called()
        assert clock.sleeps == []

    def test_poll_failure_aborts_screening(self):
        clock = FakeClock()
        poll = Mock(side_effect=[pending_job(), UpstreamCallError("boom", status_code=500)])

        with pytest.raises(UpstreamCallError):
            screen("9321483", submit_ok, poll, clock=clock)

        assert poll.call_count == 2

    def test_submits_exactly_once(self):
        submit = Mock(return_value=SubmissionResult(transaction_id="tx-9"))
        poll = Mock(side_effect=[pending_job(), complete_job()])

        screen("9321483", submit, poll, clock=FakeClock())

        submit.assert_called_once_with()
        poll.assert_called_with("tx-9")


class TestRunAutoScreening:
    """Wiring of the PurpleTrac client into the screener."""

    def test_uses_purpletrac_endpoints(self, mock_upstream):
        responses = iter([
            {"objects": []},
            {"objects": [{"screening_status": "COMPLETE", "report_generation_complete": True, "overall_severity": "LOW"}]},
        ])

        def handler(request):
            if request.url.path.endswith("/registration"):
                return httpx.Response(201, json={"transaction_id": "tx-42"})
            return httpx.Response(200, json=next(responses))

        recorder = mock_upstream(handler)

        result = run_auto_screening("9321483", clock=FakeClock())

        assert result.transaction_id == "tx-42"
        assert result.overall_severity == "LOW"

        registration = recorder.requests[0]
        assert registration.method == "POST"
        assert registration.url.params["username"] == "test-user"
        assert registration.url.params["api_key"] == "test-api-key"
        assert b'"registered_name":"9321483"' in registration.content.replace(b" ", b"")
        assert b"AUTO_SCREENING_PROTOTYPE" in registration.content

        status_call = recorder.requests[1]
        assert status_call.method == "GET"
        assert status_call.url.path.endswith("/transaction")
        assert status_call.url.params["id"] == "tx-42"
        assert len(recorder.requests) == 3

    def test_reads_timing_from_environment(self):
        captured = {}

        def fake_screen(subject_id, submit, poll, clock=None, config=None):
            captured["config"] = config
            return Mock()

        with patch("devportal.logic.screening.screen", side_effect=fake_screen):
            run_auto_screening("9321483")

        assert captured["config"] == ScreeningConfig(5.0, 5.0, 300.0)

    def test_null_report_flag_keeps_polling(self, mock_upstream):
        responses = iter([
            {"objects": [{"screening_status": "PENDING", "report_generation_complete": None, "overall_severity": None}]},
            {"objects": ["not-a-job"]},
            {"objects": [{"screening_status": "COMPLETE", "report_generation_complete": True, "overall_severity": "LOW"}]},
        ])

        def handler(request):
            if request.url.path.endswith("/registration"):
                return httpx.Response(201, json={"transaction_id": "tx-7"})
            return httpx.Response(200, json=next(responses))

        recorder = mock_upstream(handler)

        result = run_auto_screening("9321483", clock=FakeClock())

        assert result.overall_severity == "LOW"
        assert len(recorder.requests) == 4
