"""
Retry executor for one logical upstream request.

Runs the attempt loop around a BaseUpstreamClient:

    attempt -> classify -> decide -> (sleep) -> (rotate) -> attempt ...

Each logical request is a single coroutine, so one request's backoff sleep
never stalls another's. The only shared mutable state is the CredentialPool,
which serializes rotation itself.

Usage:
    executor = RetryExecutor(client, pool, engine)
    response, metadata = await executor.execute(payload, cancel_event=disconnected)
"""

import asyncio
import time
import uuid
from typing import Any, Dict, Optional

import httpx
import structlog

from upstream_retry.credentials.pool import CredentialPool, mask_key
from upstream_retry.llm.base_client import BaseUpstreamClient
from upstream_retry.llm.exceptions import UpstreamClientError
from upstream_retry.llm.messages_client import parse_error_body
from upstream_retry.models.enums import FailureClass
from upstream_retry.models.retry_models import AttemptOutcome, RetryDecision
from upstream_retry.monitoring.metrics import (
    credential_rotations_total,
    retries_exhausted_total,
    retry_decisions_total,
    upstream_latency_seconds,
)
from upstream_retry.retry.classifier import TRANSPORT_FAILURE_STATUS, classify_exception
from upstream_retry.retry.engine import RetryDecisionEngine
from upstream_retry.retry.exceptions import (
    NonRetryableError,
    RequestCancelled,
    RetryExhausted,
)
from upstream_retry.retry.metadata import RetryMetadata

logger = structlog.get_logger(__name__)


def _status_class(status_code: int) -> str:
    if status_code == TRANSPORT_FAILURE_STATUS:
        return "transport"
    return f"{status_code // 100}xx"


class RetryExecutor:
    """
    Executes upstream requests under the retry decision engine.

    Attributes:
        client: Upstream client (one attempt per call)
        pool: Shared credential pool
        engine: Retry decision engine
        metrics_enabled: Record Prometheus metrics
    """

    def __init__(
        self,
        client: BaseUpstreamClient,
        pool: CredentialPool,
        engine: RetryDecisionEngine,
        metrics_enabled: bool = True,
    ):
        self.client = client
        self.pool = pool
        self.engine = engine
        self.metrics_enabled = metrics_enabled

    async def execute(
        self,
        payload: Dict[str, Any],
        cancel_event: Optional[asyncio.Event] = None,
        request_id: Optional[str] = None,
    ) -> tuple[httpx.Response, RetryMetadata]:
        """
        Run one logical request until success or a terminal outcome.

        Args:
            payload: JSON request body
            cancel_event: Set by the caller when the request is abandoned
                (e.g. client disconnect); checked before every attempt and
                every sleep, and interrupts an ongoing sleep before any
                account rotation
            request_id: Correlation id bound to all log lines (generated if omitted)

        Returns:
            Tuple of (successful response, retry metadata)

        Raises:
            NonRetryableError: Upstream rejected the request permanently
            RetryExhausted: Attempt budget used up
            RequestCancelled: cancel_event was set
        """
        with structlog.contextvars.bound_contextvars(
            request_id=request_id or str(uuid.uuid4()),
        ):
            return await self._run(payload, cancel_event)

    async def _run(
        self,
        payload: Dict[str, Any],
        cancel_event: Optional[asyncio.Event],
    ) -> tuple[httpx.Response, RetryMetadata]:
        start_time = time.monotonic()
        decisions: list[dict] = []
        credentials_used: list[str] = []
        api_key = self.pool.active()
        attempt_index = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Request cancelled before attempt", attempts_made=attempt_index)
                raise RequestCancelled(attempt_index)

            attempt_index += 1
            credentials_used.append(mask_key(api_key))
            attempt_start = time.monotonic()
            transport_error: UpstreamClientError | None = None
            response: httpx.Response | None = None

            try:
                response = await self.client.send(payload, api_key)
            except UpstreamClientError as e:
                transport_error = e

            if response is not None:
                status = response.status_code
                body = None if 200 <= status < 300 else parse_error_body(response)
                outcome, decision = self.engine.evaluate(status, body, attempt_index)
            else:
                status = TRANSPORT_FAILURE_STATUS
                body = transport_error.message
                outcome, decision = self.engine.evaluate(
                    status,
                    body,
                    attempt_index,
                    classification=classify_exception(transport_error),
                )

            decisions.append(self._record(outcome, decision))
            self._observe(outcome, decision, time.monotonic() - attempt_start)

            if outcome.classification == FailureClass.SUCCESS:
                return response, self._metadata(start_time, decisions, credentials_used)

            if outcome.classification == FailureClass.NON_RETRYABLE:
                raise NonRetryableError(
                    status_code=status,
                    body=body,
                    retry_metadata=self._metadata(start_time, decisions, credentials_used),
                )

            if not decision.should_retry:
                if self.metrics_enabled:
                    retries_exhausted_total.labels(
                        failure_class=outcome.classification.value
                    ).inc()
                raise RetryExhausted(
                    retry_metadata=self._metadata(start_time, decisions, credentials_used),
                    last_outcome=outcome,
                    last_body=body,
                ) from transport_error

            if cancel_event is not None and cancel_event.is_set():
                logger.info("Request cancelled before backoff", attempts_made=attempt_index)
                raise RequestCancelled(attempt_index)

            await self._sleep(decision.delay_ms, cancel_event)

            # An abandoned request must not move the shared account cursor
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Request cancelled during backoff", attempts_made=attempt_index)
                raise RequestCancelled(attempt_index)

            if decision.rotate_credential:
                if self.metrics_enabled:
                    credential_rotations_total.inc()
                api_key = await self.pool.rotate(api_key)

    async def _sleep(self, delay_ms: int, cancel_event: Optional[asyncio.Event]) -> None:
        """Wait delay_ms, waking early if cancel_event is set."""
        if delay_ms <= 0:
            return
        if cancel_event is None:
            await asyncio.sleep(delay_ms / 1000)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay_ms / 1000)
        except asyncio.TimeoutError:
            pass

    def _record(self, outcome: AttemptOutcome, decision: RetryDecision) -> dict:
        return {
            "attempt": outcome.attempt_index,
            "status_code": outcome.raw_status_code,
            "failure_class": outcome.classification.value,
            "should_retry": decision.should_retry,
            "backoff_kind": decision.backoff_kind.value,
            "delay_ms": decision.delay_ms,
            "rotate_credential": decision.rotate_credential,
        }

    def _observe(self, outcome: AttemptOutcome, decision: RetryDecision, latency_s: float) -> None:
        if not self.metrics_enabled:
            return
        retry_decisions_total.labels(
            failure_class=outcome.classification.value,
            backoff_kind=decision.backoff_kind.value,
        ).inc()
        upstream_latency_seconds.labels(
            status_class=_status_class(outcome.raw_status_code)
        ).observe(latency_s)

    def _metadata(
        self,
        start_time: float,
        decisions: list[dict],
        credentials_used: list[str],
    ) -> RetryMetadata:
        return RetryMetadata(
            total_attempts=len(decisions),
            total_latency_ms=int((time.monotonic() - start_time) * 1000),
            decisions=list(decisions),
            credentials_used=list(credentials_used),
        )
