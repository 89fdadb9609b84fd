"""Draw results stored in one wide table.

Primary key is (loteria, concurso). List-valued fields live in JSON columns.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from loterias.models.base import Base

Money = Numeric(18, 2)


class ResultadoRow(Base):
    """One row per (game, contest)."""

    __tablename__ = "resultados"

    loteria: Mapped[str] = mapped_column(String(20), primary_key=True)
    concurso: Mapped[int] = mapped_column(Integer, primary_key=True)

    data: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    local: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    dezenas: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    dezenas_ordem_sorteio: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    trevos: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    mes_sorte: Mapped[str | None] = mapped_column(String(20), nullable=True)
    time_coracao: Mapped[str | None] = mapped_column(String(100), nullable=True)
    premiacoes: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    local_ganhadores: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    observacao: Mapped[str | None] = mapped_column(Text, nullable=True)
    acumulou: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    proximo_concurso: Mapped[int | None] = mapped_column(Integer, nullable=True)
    data_proximo_concurso: Mapped[str | None] = mapped_column(String(20), nullable=True)

    valor_arrecadado: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    valor_acumulado_concurso_0_5: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    valor_acumulado_concurso_especial: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    valor_acumulado_proximo_concurso: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    valor_estimado_proximo_concurso: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
