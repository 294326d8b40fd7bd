"""Unit test fixtures (mocks and stubs).

Provides fakes for testing without a running SOAP service.
"""

import pytest
from typing import Any, Mapping, Optional, Union
from unittest.mock import Mock

from inventory_client.audit.audit_log import AuditLog
from inventory_client.models.invocation import Credentials
from inventory_client.soap.base_transport import BaseSoapTransport, TransportReply


class ScriptedTransport(BaseSoapTransport):
    """Transport replaying a fixed list of replies, one per call.

    Entries may be TransportReply instances or exceptions (raised as-is).
    The last entry repeats once the script runs out.
    """

    def __init__(self, replies: list[Union[TransportReply, BaseException]]):
        super().__init__("http://inventory.test/InventarioService", "http://ws.inventario.ferreteria.com/")
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def call(
        self,
        operation: str,
        args: Mapping[str, Any],
        timeout_ms: int,
        credentials: Optional[Credentials] = None,
    ) -> TransportReply:
        self.calls.append({
            "operation": operation,
            "args": dict(args),
            "timeout_ms": timeout_ms,
            "credentials": credentials,
        })
        index = min(len(self.calls), len(self.replies)) - 1
        reply = self.replies[index]
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def list_operations(self) -> list[str]:
        return ["verificarEstado", "consultarArticulo"]


class SleepRecorder:
    """Async stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def scripted_transport():
    """Factory fixture building a ScriptedTransport from a list of replies."""
    def _create(*replies: Union[TransportReply, BaseException]) -> ScriptedTransport:
        return ScriptedTransport(list(replies))

    return _create


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    """Records backoff delays instead of sleeping."""
    return SleepRecorder()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Hand-driven monotonic clock."""
    return FakeClock()


@pytest.fixture
def audit_log(tmp_path) -> AuditLog:
    """Audit log in a per-test temporary directory."""
    return AuditLog(tmp_path / "soap_calls.log")


@pytest.fixture
def mock_observer():
    """Mock InvocationObserver recording every callback."""
    observer = Mock()
    observer.on_probe = Mock()
    observer.on_attempt_started = Mock()
    observer.on_attempt_finished = Mock()
    observer.on_retry_scheduled = Mock()
    observer.on_outcome = Mock()
    return observer


@pytest.fixture
def credentials() -> Credentials:
    """Service credentials used by the original seed data."""
    return Credentials(username="admin", password="admin123")
