"""
Automated compliance screening with bounded polling.

A screening run submits one job upstream, waits a fixed lead time, then polls
the job status on a fixed interval until the report is complete or the
polling budget is spent. Running out of budget is not an error: the run ends
with the synthetic ``ERROR`` severity so the caller always gets a verdict.

Failures of the submission call or of an individual poll propagate to the
caller unchanged.

The budget is checked before each poll is issued, so a poll that starts just
before the deadline runs to completion under the upstream call timeout.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from aws_lambda_powertools.metrics import MetricUnit

from devportal.handlers.models.env_vars import get_api_env_vars, get_screening_env_vars
from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.logic.purpletrac import PurpleTracClient, PurpleTracCredentials
from devportal.logic.upstream import get_upstream_client
from devportal.models.screening import (
    SEVERITY_ERROR,
    ScreeningJob,
    ScreeningResult,
    ScreeningState,
    SubmissionResult,
)


class Clock(Protocol):
    """Source of time for the polling loop."""

    def now(self) -> float:
        """Monotonic time in seconds."""
        ...

    def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    """Wall clock backed by the ``time`` module."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


@dataclass(frozen=True)
class ScreeningConfig:
    """Timing of one screening run, in seconds."""

    initial_delay_seconds: float = 5.0
    poll_interval_seconds: float = 5.0
    timeout_seconds: float = 300.0

    @property
    def max_polls(self) -> int:
        return int(self.timeout_seconds // self.poll_interval_seconds)


@tracer.capture_method
def screen(
    subject_id: str,
    submit: Callable[[], SubmissionResult],
    poll: Callable[[str], Optional[ScreeningJob]],
    clock: Optional[Clock] = None,
    config: Optional[ScreeningConfig] = None,
) -> ScreeningResult:
    """
    Run one screening job to a verdict.

    Args:
        subject_id: What is being screened (an IMO number); used for logging
        submit: Submits the job and returns its transaction id
        poll: Returns the job status, or None when nothing is reported yet
        clock: Time source, the system clock by default
        config: Delay, interval and timeout, the defaults otherwise

    Returns:
        The upstream severity when the job completes, ``ERROR`` on timeout
    """
    clock = clock or SystemClock()
    config = config or ScreeningConfig()

    transaction_id = submit().transaction_id
    state = ScreeningState.SUBMITTED
    logger.info('Screening submitted', extra={
        'subject_id': subject_id,
        'transaction_id': transaction_id,
        'state': state.value,
    })

    clock.sleep(config.initial_delay_seconds)
    state = ScreeningState.POLLING
    started_at = clock.now()
    attempts = 0

    while clock.now() - started_at < config.timeout_seconds:
        job = poll(transaction_id)
        attempts += 1

        if job is not None and job.is_complete:
            state = ScreeningState.COMPLETE
            severity = job.overall_severity or SEVERITY_ERROR
            logger.info('Screening completed', extra={
                'subject_id': subject_id,
                'transaction_id': transaction_id,
                'overall_severity': severity,
                'attempts': attempts,
                'state': state.value,
            })
            metrics.add_metric(name='ScreeningCompleted', unit=MetricUnit.Count, value=1)
            return ScreeningResult(transaction_id=transaction_id, overall_severity=severity)

        clock.sleep(config.poll_interval_seconds)

    state = ScreeningState.TIMED_OUT
    logger.warning('Screening timed out, setting severity to ERROR', extra={
        'subject_id': subject_id,
        'transaction_id': transaction_id,
        'attempts': attempts,
        'timeout_seconds': config.timeout_seconds,
        'state': state.value,
    })
    metrics.add_metric(name='ScreeningTimedOut', unit=MetricUnit.Count, value=1)
    return ScreeningResult(transaction_id=transaction_id, overall_severity=SEVERITY_ERROR)


def run_auto_screening(imo: str, clock: Optional[Clock] = None) -> ScreeningResult:
    """Screen a vessel against PurpleTrac using the configured credentials and timing."""
    settings = get_screening_env_vars()
    client = PurpleTracClient(
        upstream=get_upstream_client(),
        base_url=get_api_env_vars().PTE_BASE_URL,
        credentials=PurpleTracCredentials(username=settings.PTE_USERNAME, api_key=settings.PTE_API_KEY),
    )
    config = ScreeningConfig(
        initial_delay_seconds=settings.SCREENING_INITIAL_DELAY_SECONDS,
        poll_interval_seconds=settings.SCREENING_POLL_INTERVAL_SECONDS,
        timeout_seconds=settings.SCREENING_TIMEOUT_SECONDS,
    )
    return screen(
        subject_id=imo,
        submit=lambda: client.register_screening(imo),
        poll=client.get_transaction,
        clock=clock,
        config=config,
    )
