"""
Operation catalog of the inventory service and client-side argument checks.

Known operations are validated against their pydantic argument models.
Operations discovered at runtime (WSDL) but absent from the catalog are
passed through after a structural check only.
"""

import re
from typing import Any, Mapping

import structlog
from pydantic import BaseModel, ValidationError

from inventory_client.models.operation_args import (
    ActualizarStockArgs,
    ConsultarArticuloArgs,
    InsertarArticuloArgs,
    NoArgs,
)
from inventory_client.soap.exceptions import ArgumentValidationError


logger = structlog.get_logger(__name__)

OPERATION_ARGUMENTS: dict[str, type[BaseModel]] = {
    "verificarEstado": NoArgs,
    "consultarArticulo": ConsultarArticuloArgs,
    "actualizarStock": ActualizarStockArgs,
    "insertarArticulo": InsertarArticuloArgs,
    "listarCategorias": NoArgs,
    "listarProveedores": NoArgs,
}

_OPERATION_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")


def validate_arguments(operation: str, args: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Check an operation name and its arguments before dispatch.

    Args:
        operation: Remote operation name
        args: Argument mapping (None means no arguments)

    Returns:
        Normalized argument dict (validated and with None values dropped for
        catalog operations)

    Raises:
        ArgumentValidationError: Operation name or arguments are invalid
    """
    if not isinstance(operation, str) or not _OPERATION_NAME.match(operation):
        raise ArgumentValidationError(
            f"Invalid operation name: {operation!r}",
            details={"operation": repr(operation)}
        )

    if args is None:
        args = {}
    if not isinstance(args, Mapping):
        raise ArgumentValidationError(
            f"Arguments for {operation} must be a mapping, got {type(args).__name__}",
            details={"operation": operation, "type": type(args).__name__}
        )

    bad_keys = [key for key in args if not isinstance(key, str) or not key]
    if bad_keys:
        raise ArgumentValidationError(
            f"Argument names for {operation} must be non-empty strings",
            details={"operation": operation, "invalid_keys": [repr(k) for k in bad_keys]}
        )

    model = OPERATION_ARGUMENTS.get(operation)
    if model is None:
        logger.debug("Operation not in catalog, structural check only", operation=operation)
        return dict(args)

    try:
        validated = model.model_validate(dict(args))
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ArgumentValidationError(
            f"Invalid arguments for {operation}: {'; '.join(errors)}",
            details={"operation": operation, "validation_errors": errors}
        ) from e

    return validated.model_dump(exclude_none=True)
