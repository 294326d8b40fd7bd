"""
Observer hooks for presentation layers.

The invoker never prints. A CLI or UI that wants progress messages
("retrying in 2s...", "server looks unreachable") implements
InvocationObserver and passes it in.
"""

from typing import Protocol

from inventory_client.models.invocation import InvocationAttempt, InvocationOutcome


class InvocationObserver(Protocol):
    """Callbacks fired by RetryingInvoker, in order, for each logical call."""

    def on_probe(self, endpoint_reachable: bool) -> None:
        ...

    def on_attempt_started(self, operation: str, attempt: int, timeout_ms: int) -> None:
        ...

    def on_attempt_finished(self, operation: str, attempt: InvocationAttempt) -> None:
        ...

    def on_retry_scheduled(self, operation: str, next_attempt: int, delay_ms: int) -> None:
        ...

    def on_outcome(self, operation: str, outcome: InvocationOutcome) -> None:
        ...


class NullObserver:
    """Observer that ignores everything."""

    def on_probe(self, endpoint_reachable: bool) -> None:
        pass

    def on_attempt_started(self, operation: str, attempt: int, timeout_ms: int) -> None:
        pass

    def on_attempt_finished(self, operation: str, attempt: InvocationAttempt) -> None:
        pass

    def on_retry_scheduled(self, operation: str, next_attempt: int, delay_ms: int) -> None:
        pass

    def on_outcome(self, operation: str, outcome: InvocationOutcome) -> None:
        pass
