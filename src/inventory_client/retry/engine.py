"""
Retrying invoker for SOAP operations.

One logical call is realized through up to max_attempts physical attempts.
Each attempt is judged on its raw body as well as on the transport's
verdict, because the inventory service has been seen returning truncated
envelopes with 200 OK and complete envelopes with 500.

Attempt decision table:
    transport ok, body COMPLETE / NOT_APPLICABLE  -> succeeded
    transport ok, body TRUNCATED                  -> retry or fail
    transport error, no body                      -> retry or fail
    transport error, body TRUNCATED               -> retry or fail
    transport error, body COMPLETE                -> tolerant extraction
        extractor success                         -> succeeded (recovered)
        extractor failure                         -> retry or fail
    transport error, body NOT_APPLICABLE          -> retry or fail
    argument error                                -> fail now, no retry

Retry or fail: while attempts remain, wait BASE_DELAY_MS * n and go again;
otherwise the last attempt decides the failure kind.

Usage:
    invoker = RetryingInvoker(HttpSoapTransport(), audit_log=AuditLog("logs/soap_calls.log"))
    outcome = await invoker.invoke("consultarArticulo", {"codigo": "MART-001"})
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping, Optional

import structlog

from inventory_client.audit.audit_log import AuditLog
from inventory_client.models.enums import AttemptClassification, CompletenessVerdict, FailureKind
from inventory_client.models.invocation import (
    Credentials,
    InvocationAttempt,
    InvocationFailure,
    InvocationOutcome,
    InvocationSuccess,
)
from inventory_client.monitoring.metrics import (
    soap_attempt_latency_seconds,
    soap_attempts_total,
    soap_invocations_total,
    soap_recoveries_total,
)
from inventory_client.parsing.completeness import CompletenessDetector
from inventory_client.parsing.extractor import NO_DATA_MESSAGE, TolerantExtractor
from inventory_client.retry.backoff import RetryPolicy
from inventory_client.retry.observer import InvocationObserver, NullObserver
from inventory_client.soap.base_transport import BaseSoapTransport, TransportReply
from inventory_client.soap.exceptions import (
    ArgumentValidationError,
    SoapConnectionError,
    SoapFaultError,
    SoapTimeoutError,
    SoapTruncatedResponseError,
)
from inventory_client.soap.operations import validate_arguments

logger = structlog.get_logger(__name__)

_ACCEPTED = (AttemptClassification.SUCCEEDED, AttemptClassification.RECOVERED)


@dataclass
class _Judgement:
    """Verdict on one attempt, before it is folded into the call state."""

    classification: AttemptClassification
    error: Optional[Exception] = None
    result: Any = None
    server_message: Optional[str] = None
    truncation_reason: Optional[str] = None


class RetryingInvoker:
    """
    Drives one logical call across sequential physical attempts.

    Holds no per-call state between invocations, so independent calls may
    run concurrently as separate tasks. The audit log is the only shared
    resource and serializes its own writes.

    Attributes:
        transport: SOAP transport used for every attempt
        policy: Attempt budget, timeouts and backoff
        detector: Completeness detector for raw bodies
        extractor: Tolerant extractor for bodies the decoder rejected
        audit_log: Optional audit log (None disables auditing)
        observer: Presentation hooks
    """

    def __init__(
        self,
        transport: BaseSoapTransport,
        policy: Optional[RetryPolicy] = None,
        detector: Optional[CompletenessDetector] = None,
        extractor: Optional[TolerantExtractor] = None,
        audit_log: Optional[AuditLog] = None,
        observer: Optional[InvocationObserver] = None,
        probe: Optional[Callable[[], Awaitable[bool]]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        metrics_enabled: bool = True,
    ):
        """
        Initialize the invoker.

        Args:
            transport: SOAP transport
            policy: Retry policy (defaults to RetryPolicy())
            detector: Completeness detector (defaults to 200-byte threshold)
            extractor: Tolerant extractor (defaults to standard strategies)
            audit_log: Audit log, or None
            observer: Presentation hooks (defaults to NullObserver)
            probe: Zero-argument coroutine factory returning reachability;
                run once before the first invocation
            sleep: Backoff sleep (seconds), injectable for tests
            clock: Monotonic clock (seconds), injectable for tests
            metrics_enabled: Record Prometheus metrics
        """
        self.transport = transport
        self.policy = policy or RetryPolicy()
        self.detector = detector or CompletenessDetector()
        self.extractor = extractor or TolerantExtractor()
        self.audit_log = audit_log
        self.observer = observer or NullObserver()
        self.metrics_enabled = metrics_enabled
        self._probe = probe
        self._probe_done = False
        self._sleep = sleep
        self._clock = clock

        logger.info(
            "RetryingInvoker initialized",
            transport=repr(transport),
            max_attempts=self.policy.max_attempts,
            base_timeout_ms=self.policy.base_timeout_ms,
            timeout_increment_ms=self.policy.timeout_increment_ms,
            base_delay_ms=self.policy.base_delay_ms,
        )

    async def warm_up(self) -> Optional[bool]:
        """
        Run the reachability probe once.

        Returns:
            Probe verdict, or None when no probe is configured or it already ran
        """
        if self._probe is None or self._probe_done:
            return None
        self._probe_done = True

        reachable = await self._probe()
        if not reachable:
            logger.warning("Service did not answer the reachability probe, calling anyway")
        self.observer.on_probe(reachable)
        return reachable

    async def invoke(
        self,
        operation: str,
        args: Optional[Mapping[str, Any]] = None,
        max_attempts: Optional[int] = None,
        credentials: Optional[Credentials] = None,
        deadline_ms: Optional[int] = None,
    ) -> InvocationOutcome:
        """
        Execute one logical call.

        Args:
            operation: Remote operation name
            args: Operation arguments
            max_attempts: Attempt budget override (defaults to the policy's)
            credentials: HTTP Basic credentials for this call
            deadline_ms: Overall wall-time budget; clips attempt timeouts
                and backoff sleeps

        Returns:
            InvocationSuccess or InvocationFailure (never raises for remote
            problems; task cancellation propagates)
        """
        budget = max_attempts if max_attempts is not None else self.policy.max_attempts
        if budget < 1:
            raise ValueError("max_attempts must be >= 1")

        started = self._clock()
        log = logger.bind(operation=operation)

        try:
            call_args = validate_arguments(operation, args)
            self.transport.prepare(operation, call_args)
        except ArgumentValidationError as e:
            log.warning("Arguments rejected before dispatch", error=e.message, details=e.details)
            failure = InvocationFailure(kind=FailureKind.INVALID_ARGUMENTS, last_error=e, attempts=0)
            return await self._finish(operation, failure, started)

        await self.warm_up()

        deadline = started + deadline_ms / 1000.0 if deadline_ms is not None else None
        server_message: Optional[str] = None
        last: Optional[_Judgement] = None

        log.info("Starting invocation", max_attempts=budget, deadline_ms=deadline_ms)

        for n in range(1, budget + 1):
            timeout_ms = self.policy.attempt_timeout_ms(n)
            if deadline is not None:
                remaining_ms = self._remaining_ms(deadline)
                if remaining_ms <= 0:
                    return await self._deadline_failure(operation, last, n - 1, server_message, started)
                timeout_ms = min(timeout_ms, remaining_ms)

            await self._audit("record_attempt", operation, call_args, n)
            self.observer.on_attempt_started(operation, n, timeout_ms)
            log.debug("Attempt started", attempt=n, timeout_ms=timeout_ms)

            started_at = datetime.now(timezone.utc)
            attempt_clock = self._clock()
            reply = await self._exchange(operation, call_args, timeout_ms, credentials)
            elapsed_s = self._clock() - attempt_clock

            judgement = self._judge(operation, reply)
            if judgement.truncation_reason == "unclosed_envelope":
                await self._audit(
                    "record_unclassified_body", operation, reply.raw_body, judgement.truncation_reason
                )
            attempt = InvocationAttempt(
                attempt=n,
                timeout_ms=timeout_ms,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc),
                classification=judgement.classification,
                raw_body=reply.raw_body,
                error=judgement.error,
            )
            await self._record_attempt(operation, attempt, elapsed_s)
            last = judgement
            if judgement.server_message:
                server_message = judgement.server_message

            if judgement.classification in _ACCEPTED:
                recovered = judgement.classification == AttemptClassification.RECOVERED
                if recovered and self.metrics_enabled:
                    soap_recoveries_total.labels(operation=operation).inc()
                success = InvocationSuccess(
                    result=judgement.result,
                    recovered_from_raw_body=recovered,
                    attempts=n,
                    duration_ms=self._elapsed_ms(started),
                )
                return await self._finish(operation, success, started)

            if judgement.classification == AttemptClassification.INVALID_ARGUMENTS:
                failure = InvocationFailure(
                    kind=FailureKind.INVALID_ARGUMENTS,
                    last_error=judgement.error,
                    attempts=n - 1,
                    duration_ms=self._elapsed_ms(started),
                )
                return await self._finish(operation, failure, started)

            log.warning(
                "Attempt failed",
                attempt=n,
                max_attempts=budget,
                classification=judgement.classification.value,
                error_type=type(judgement.error).__name__ if judgement.error else None,
            )

            if n == budget:
                break

            delay_ms = self.policy.backoff_delay_ms(n)
            if deadline is not None and delay_ms >= self._remaining_ms(deadline):
                return await self._deadline_failure(operation, last, n, server_message, started)

            self.observer.on_retry_scheduled(operation, n + 1, delay_ms)
            log.info("Retrying", next_attempt=n + 1, delay_ms=delay_ms)
            await self._sleep(delay_ms / 1000.0)

        failure = self._exhausted_failure(last, budget, server_message, started)
        return await self._finish(operation, failure, started)

    async def _exchange(
        self,
        operation: str,
        args: Mapping[str, Any],
        timeout_ms: int,
        credentials: Optional[Credentials],
    ) -> TransportReply:
        # httpx timeouts are per phase; wait_for bounds the whole exchange
        try:
            return await asyncio.wait_for(
                self.transport.call(operation, args, timeout_ms, credentials),
                timeout=timeout_ms / 1000.0,
            )
        except asyncio.TimeoutError:
            return TransportReply(
                error=SoapTimeoutError(
                    f"{operation} exceeded its {timeout_ms} ms budget",
                    details={"operation": operation, "timeout_ms": timeout_ms},
                )
            )

    def _judge(self, operation: str, reply: TransportReply) -> _Judgement:
        error = reply.error

        if isinstance(error, ArgumentValidationError):
            return _Judgement(AttemptClassification.INVALID_ARGUMENTS, error=error)

        if error is None:
            if reply.raw_body is None:
                # Transport without raw access; its decoder has the last word
                return _Judgement(AttemptClassification.SUCCEEDED, result=reply.result)
            verdict, reason = self.detector.classify_with_reason(reply.raw_body)
            if verdict == CompletenessVerdict.TRUNCATED:
                return self._truncated(operation, reply.raw_body, reason)
            return _Judgement(AttemptClassification.SUCCEEDED, result=reply.result)

        if reply.raw_body is None:
            return _Judgement(AttemptClassification.TRANSPORT_ERROR, error=error)

        verdict, reason = self.detector.classify_with_reason(reply.raw_body)
        if verdict == CompletenessVerdict.TRUNCATED:
            return self._truncated(operation, reply.raw_body, reason)
        if verdict == CompletenessVerdict.NOT_APPLICABLE:
            return _Judgement(AttemptClassification.UNUSABLE_BODY, error=error)

        extraction = self.extractor.extract(reply.raw_body, operation)
        message = extraction.message if extraction.message != NO_DATA_MESSAGE else None
        if message is None and isinstance(error, SoapFaultError):
            message = error.fault_string

        if extraction.success:
            logger.info(
                "Recovered result from raw body",
                operation=operation,
                decoder_error=type(error).__name__,
                fields=sorted(extraction.fields),
            )
            result = dict(extraction.fields)
            if extraction.message:
                result["mensaje"] = extraction.message
            return _Judgement(AttemptClassification.RECOVERED, result=result, server_message=message)

        return _Judgement(
            AttemptClassification.EXTRACTION_FAILED,
            error=error,
            server_message=message,
        )

    def _truncated(self, operation: str, raw_body: str, reason: str) -> _Judgement:
        error = SoapTruncatedResponseError(
            f"{operation} response truncated ({reason})",
            details={"operation": operation, "reason": reason, "body_length": len(raw_body)},
        )
        return _Judgement(AttemptClassification.TRUNCATED, error=error, truncation_reason=reason)

    def _exhausted_failure(
        self,
        last: Optional[_Judgement],
        attempts: int,
        server_message: Optional[str],
        started: float,
    ) -> InvocationFailure:
        kind = FailureKind.TRANSPORT
        was_truncated = False
        last_error = last.error if last is not None else None

        if last is not None:
            if last.classification == AttemptClassification.TRUNCATED:
                kind = FailureKind.INCOMPLETE
                was_truncated = True
            elif (
                last.classification == AttemptClassification.EXTRACTION_FAILED
                and last.server_message
            ):
                kind = FailureKind.REJECTED
            elif isinstance(last_error, SoapConnectionError):
                kind = FailureKind.UNREACHABLE

        return InvocationFailure(
            kind=kind,
            last_error=last_error,
            attempts_exhausted=True,
            was_truncated=was_truncated,
            attempts=attempts,
            server_message=server_message,
            duration_ms=self._elapsed_ms(started),
        )

    async def _deadline_failure(
        self,
        operation: str,
        last: Optional[_Judgement],
        attempts: int,
        server_message: Optional[str],
        started: float,
    ) -> InvocationOutcome:
        logger.warning("Invocation deadline exceeded", operation=operation, attempts=attempts)
        failure = InvocationFailure(
            kind=FailureKind.DEADLINE_EXCEEDED,
            last_error=last.error if last is not None else None,
            was_truncated=last is not None and last.classification == AttemptClassification.TRUNCATED,
            attempts=attempts,
            server_message=server_message,
            duration_ms=self._elapsed_ms(started),
        )
        return await self._finish(operation, failure, started)

    async def _audit(self, method: str, *args: Any) -> None:
        # File I/O runs off the event loop; the log's own lock orders writes
        if self.audit_log is not None:
            await asyncio.to_thread(getattr(self.audit_log, method), *args)

    async def _record_attempt(
        self, operation: str, attempt: InvocationAttempt, elapsed_s: float
    ) -> None:
        await self._audit("record_attempt_result", operation, attempt)
        if self.metrics_enabled:
            soap_attempts_total.labels(
                operation=operation, classification=attempt.classification.value
            ).inc()
            soap_attempt_latency_seconds.labels(operation=operation).observe(elapsed_s)
        self.observer.on_attempt_finished(operation, attempt)

    async def _finish(
        self, operation: str, outcome: InvocationOutcome, started: float
    ) -> InvocationOutcome:
        duration_ms = self._elapsed_ms(started)
        await self._audit("record_outcome", operation, outcome, duration_ms)
        if self.metrics_enabled:
            soap_invocations_total.labels(
                operation=operation, outcome="success" if outcome.ok else "failure"
            ).inc()

        if isinstance(outcome, InvocationSuccess):
            logger.info(
                "Invocation succeeded",
                operation=operation,
                attempts=outcome.attempts,
                recovered_from_raw_body=outcome.recovered_from_raw_body,
                duration_ms=duration_ms,
            )
        else:
            logger.error(
                "Invocation failed",
                operation=operation,
                kind=outcome.kind.value,
                attempts=outcome.attempts,
                was_truncated=outcome.was_truncated,
                user_message=outcome.user_message,
                duration_ms=duration_ms,
            )

        self.observer.on_outcome(operation, outcome)
        return outcome

    def _remaining_ms(self, deadline: float) -> int:
        return int((deadline - self._clock()) * 1000)

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int((self._clock() - started) * 1000))
