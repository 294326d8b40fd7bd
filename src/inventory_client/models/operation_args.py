"""
Argument models for the inventory service operations.

Arguments are checked client-side before any network call: a request that
cannot pass these models is never dispatched and does not consume attempt
budget. Business rules (code format, price margins) remain the server's
concern; only presence and basic types are checked here.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class NoArgs(BaseModel):
    """Operations that take no arguments (verificarEstado, listar*)."""

    model_config = ConfigDict(extra="forbid")


class ConsultarArticuloArgs(BaseModel):
    """Arguments of consultarArticulo."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    codigo: str = Field(..., min_length=1, description="Article code")


class ActualizarStockArgs(BaseModel):
    """Arguments of actualizarStock."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    codigo: str = Field(..., min_length=1, description="Article code")
    nuevoStock: int = Field(..., ge=0, description="New stock level")


class InsertarArticuloArgs(BaseModel):
    """Arguments of insertarArticulo."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    codigo: str = Field(..., min_length=1, description="Unique article code")
    nombre: str = Field(..., min_length=1, description="Article name")
    descripcion: Optional[str] = Field(default=None, description="Free-text description")
    categoriaId: Optional[int] = Field(default=None, ge=1, description="Category ID")
    proveedorId: Optional[int] = Field(default=None, ge=1, description="Supplier ID")
    precioCompra: float = Field(..., gt=0, description="Purchase price")
    precioVenta: float = Field(..., gt=0, description="Sale price")
    stockActual: int = Field(..., ge=0, description="Initial stock")
    stockMinimo: int = Field(..., ge=0, description="Minimum stock for alerts")
