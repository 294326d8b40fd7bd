"""
Command line entry point.

    inventory-client probe
    inventory-client operations
    inventory-client call consultarArticulo codigo=MART-001
    inventory-client call actualizarStock codigo=MART-001 nuevoStock=25 --retries 5 --json

Exit codes: 0 success, 1 invocation failure, 2 usage error.
"""

import argparse
import asyncio
import json
import re
import sys
from typing import Any, Optional, Sequence

import structlog

from inventory_client.config import settings
from inventory_client.logging_config import configure_logging
from inventory_client.client import InventoryServiceClient
from inventory_client.models.invocation import (
    InvocationAttempt,
    InvocationFailure,
    InvocationOutcome,
)
from inventory_client.soap.exceptions import SoapClientError
from inventory_client.soap.operations import OPERATION_ARGUMENTS

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

_INT = re.compile(r"^-?(0|[1-9][0-9]*)$")
_FLOAT = re.compile(r"^-?[0-9]+\.[0-9]+$")


def parse_value(raw: str) -> Any:
    """Turn a command line value into bool, int, float or str."""
    lowered = raw.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if _INT.match(raw):
        return int(raw)
    if _FLOAT.match(raw):
        return float(raw)
    return raw


def parse_assignments(pairs: Sequence[str], coerce: bool = True) -> dict[str, Any]:
    """
    Parse key=value pairs.

    Values stay strings when coerce is False; catalogued operations leave
    conversion to their argument models (an article code like 007 must not
    become 7).

    Raises:
        ValueError: A pair has no '=' or an empty key
    """
    args: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected key=value, got {pair!r}")
        args[key.strip()] = parse_value(value) if coerce else value
    return args


class ConsoleObserver:
    """Progress messages on stderr, command output stays on stdout."""

    def on_probe(self, endpoint_reachable: bool) -> None:
        if not endpoint_reachable:
            print(
                "Warning: service did not answer the reachability probe, trying anyway",
                file=sys.stderr,
            )

    def on_attempt_started(self, operation: str, attempt: int, timeout_ms: int) -> None:
        if attempt > 1:
            print(f"Attempt {attempt} for {operation} (timeout {timeout_ms / 1000:g}s)", file=sys.stderr)

    def on_attempt_finished(self, operation: str, attempt: InvocationAttempt) -> None:
        pass

    def on_retry_scheduled(self, operation: str, next_attempt: int, delay_ms: int) -> None:
        print(f"Retrying in {delay_ms / 1000:g}s...", file=sys.stderr)

    def on_outcome(self, operation: str, outcome: InvocationOutcome) -> None:
        if outcome.ok and outcome.recovered_from_raw_body:
            print("Note: result recovered from a malformed response", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inventory-client",
        description="Resilient client for the inventory SOAP service",
    )
    parser.add_argument(
        "--endpoint",
        default=None,
        help=f"Service endpoint (default: {settings.SOAP_ENDPOINT_URL})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {settings.APP_VERSION}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("probe", help="Check that the service answers")
    subparsers.add_parser("operations", help="List operations published in the WSDL")

    call_parser = subparsers.add_parser("call", help="Invoke an operation")
    call_parser.add_argument("operation", help="Operation name, e.g. consultarArticulo")
    call_parser.add_argument("args", nargs="*", metavar="key=value", help="Operation arguments")
    call_parser.add_argument("--retries", type=int, default=None, help="Attempt budget")
    call_parser.add_argument(
        "--timeout-ms", type=int, default=None, help="Overall deadline for the call"
    )
    call_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    return parser


def _print_result(result: Any, as_json: bool) -> None:
    if as_json or not isinstance(result, dict):
        print(json.dumps(result, ensure_ascii=False, indent=2, default=str))
        return
    for key, value in result.items():
        print(f"{key}: {value}")


def _print_failure(outcome: InvocationFailure, as_json: bool) -> None:
    if as_json:
        print(json.dumps(
            {
                "status": "failure",
                "kind": outcome.kind.value,
                "message": outcome.user_message,
                "attempts": outcome.attempts,
                "was_truncated": outcome.was_truncated,
                "server_message": outcome.server_message,
            },
            ensure_ascii=False,
            indent=2,
        ))
        return
    print(f"Error: {outcome.user_message}", file=sys.stderr)


async def _run(args: argparse.Namespace, call_args: dict[str, Any]) -> int:
    cfg = settings
    if args.endpoint:
        cfg = settings.model_copy(update={"SOAP_ENDPOINT_URL": args.endpoint})

    async with InventoryServiceClient(settings=cfg, observer=ConsoleObserver()) as client:
        if args.command == "probe":
            reachable = await client.check_reachability()
            print("reachable" if reachable else "unreachable")
            return EXIT_OK if reachable else EXIT_FAILURE

        if args.command == "operations":
            try:
                operations = await client.list_operations()
            except SoapClientError as e:
                print(f"Error: {e.message}", file=sys.stderr)
                return EXIT_FAILURE
            for name in operations:
                print(name)
            return EXIT_OK

        outcome = await client.invoke(
            args.operation,
            call_args,
            timeout_ms=args.timeout_ms,
            retries=args.retries,
        )
        if isinstance(outcome, InvocationFailure):
            _print_failure(outcome, args.json)
            return EXIT_FAILURE
        _print_result(outcome.result, args.json)
        return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else settings.LOG_LEVEL, settings.ENVIRONMENT)

    call_args: dict[str, Any] = {}
    if args.command == "call":
        if args.retries is not None and args.retries < 1:
            parser.error("--retries must be >= 1")
        if args.timeout_ms is not None and args.timeout_ms <= 0:
            parser.error("--timeout-ms must be > 0")
        try:
            call_args = parse_assignments(
                args.args, coerce=args.operation not in OPERATION_ARGUMENTS
            )
        except ValueError as e:
            parser.error(str(e))

    try:
        return asyncio.run(_run(args, call_args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
