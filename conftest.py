"""Shared fixtures: spreadsheet bytes built in memory, in-memory SQLite sessions."""
import io
from typing import Any, List, Sequence

import pandas as pd
import pytest
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from packages.shared.src import models  # noqa: F401


def xlsx_bytes(rows: Sequence[Sequence[Any]]) -> bytes:
    """Rows written as-is (no header handling) into the first sheet of an xlsx workbook."""
    buf = io.BytesIO()
    pd.DataFrame([list(r) for r in rows]).to_excel(buf, header=False, index=False, engine="openpyxl")
    return buf.getvalue()


def csv_bytes(rows: Sequence[Sequence[Any]], sep: str = ",") -> bytes:
    buf = io.StringIO()
    pd.DataFrame([list(r) for r in rows]).to_csv(buf, header=False, index=False, sep=sep)
    return buf.getvalue().encode("utf-8")


def meta_ads_rows(days: List[tuple], header_row: int = 2) -> List[list]:
    """Meta Ads export layout: preamble rows, header with amount at col 11 and date at col 19."""
    width = 21
    header = [f"Coluna {i}" for i in range(width)]
    header[0] = "Nome da campanha"
    header[11] = "Valor usado (BRL)"
    header[19] = "Início dos relatórios"
    header[20] = "Término dos relatórios"
    rows: List[list] = [[f"Relatório {i}"] + [None] * (width - 1) for i in range(header_row)]
    rows.append(header)
    for day, amount in days:
        row: list = [None] * width
        row[0] = "Campanha"
        row[11] = amount
        row[19] = day
        row[20] = day
        rows.append(row)
    return rows


HOTMART_HEADER = [
    "Data da transação",
    "DATA CORRIGIDA",
    "PRODUTO",
    "STATUS DA TRANSAÇÃO",
    "FATURAMENTO LÍQUIDO DO(A) PRODUTOR(A)",
    "FATURAMENTO DO(A) COPRODUTOR(A)",
]

KIWIFY_HEADER = ["ID da venda", "Status", "Produto", "Preço base do produto", "Taxas", "Data de Criação"]


@pytest.fixture
def mem_session():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s
