"""ORM models."""

from loterias.models.resultado import ResultadoRow

__all__ = ["ResultadoRow"]
