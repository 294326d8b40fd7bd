"""
Data models for the Inventory SOAP Client.

Includes:
- Enums (CompletenessVerdict, AttemptClassification, FailureKind)
- Invocation models (Credentials, InvocationAttempt, ExtractionResult,
  InvocationSuccess, InvocationFailure)
- Operation argument models (ConsultarArticuloArgs, ActualizarStockArgs, ...)
"""

from inventory_client.models.enums import (
    AttemptClassification,
    CompletenessVerdict,
    FailureKind,
)
from inventory_client.models.invocation import (
    Credentials,
    ExtractionResult,
    InvocationAttempt,
    InvocationFailure,
    InvocationOutcome,
    InvocationSuccess,
)
from inventory_client.models.operation_args import (
    ActualizarStockArgs,
    ConsultarArticuloArgs,
    InsertarArticuloArgs,
    NoArgs,
)

__all__ = [
    # Enums
    "AttemptClassification",
    "CompletenessVerdict",
    "FailureKind",
    # Invocation models
    "Credentials",
    "ExtractionResult",
    "InvocationAttempt",
    "InvocationFailure",
    "InvocationOutcome",
    "InvocationSuccess",
    # Operation arguments
    "ActualizarStockArgs",
    "ConsultarArticuloArgs",
    "InsertarArticuloArgs",
    "NoArgs",
]
