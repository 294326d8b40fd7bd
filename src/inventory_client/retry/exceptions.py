"""
Retrying invoker exceptions.

The invoker itself returns outcomes. InvocationFailed exists for callers
(the client facade's call()) that prefer an exception over inspecting an
InvocationFailure.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inventory_client.models.invocation import InvocationFailure


class InvocationFailed(Exception):
    """
    Raised when a logical call ends in InvocationFailure.

    Attributes:
        operation: Remote operation name
        outcome: Terminal failure with its diagnostic fields
    """

    def __init__(self, operation: str, outcome: "InvocationFailure") -> None:
        self.operation = operation
        self.outcome = outcome

        super().__init__(f"{operation}: {outcome.user_message}")
