# src/landmaps/ports/attribute_table.py
from __future__ import annotations

from typing import Protocol, runtime_checkable, Sequence
from ..contracts.core import AttributeRow

URI = str

@runtime_checkable
class AttributeReaderPort(Protocol):
    """
    Lector de la tabla de atributos (DBF u otro tabular).
    Campos ausentes o no numéricos quedan en 0; nunca es error.
    """
    def read(self, uri: URI) -> Sequence[AttributeRow]: ...

__all__ = ["AttributeReaderPort", "URI"]
