"""
Generate one month of realistic sample exports for one launch: Meta Ads spend + Hotmart and Kiwify sales.
Run from repo root: python scripts/generate_sample_data.py
Writes to data/raw/*.xlsx (Meta Ads, Hotmart) and data/raw/*.csv (Kiwify)
"""
import random
from datetime import date, timedelta
from pathlib import Path

import pandas as pd

random.seed(42)

START = date(2025, 1, 1)
DAYS = 31  # one export per calendar month
OUT_DIR = Path("data/raw")

# ---- Meta Ads: header on row 2, amount spent in column 11, reporting start in column 19 ----
META_HEADER = [
    "Nome da campanha", "Nome do conjunto de anúncios", "Nome do anúncio", "Veiculação",
    "Alcance", "Impressões", "Frequência", "Resultados", "Indicador de resultados",
    "Custo por resultado", "Orçamento", "Valor usado (BRL)", "Cliques no link", "CPC (BRL)",
    "CTR", "CPM (BRL)", "Visualizações da página de destino", "Compras", "Valor de conversão",
    "Início dos relatórios", "Término dos relatórios",
]
META_BASE_SPEND = 350.0


def meta_day(d: date) -> list:
    day_idx = (d - START).days
    trend = 1.0 + 0.004 * day_idx  # launch ramps up
    weekly = 1.15 if d.weekday() < 5 else 0.8
    noise = random.gauss(1.0, 0.12)
    spend = max(20.0, round(META_BASE_SPEND * trend * weekly * noise, 2))
    impressions = int(spend * random.gauss(60, 8))
    clicks = max(0, int(impressions * random.gauss(0.012, 0.003)))
    row = [""] * len(META_HEADER)
    row[0] = "Lançamento - Conversão"
    row[1] = "Público Quente"
    row[2] = "Anúncio 01"
    row[3] = "active"
    row[5] = impressions
    row[11] = f"{spend:.2f}".replace(".", ",")
    row[12] = clicks
    row[19] = d.strftime("%d/%m/%Y")
    row[20] = d.strftime("%d/%m/%Y")
    return row


def write_meta_ads(path: Path) -> int:
    rows = [
        ["Relatório de anúncios"] + [""] * (len(META_HEADER) - 1),
        [f"{START:%d/%m/%Y} - {START + timedelta(days=DAYS - 1):%d/%m/%Y}"] + [""] * (len(META_HEADER) - 1),
        META_HEADER,
    ]
    rows += [meta_day(START + timedelta(days=i)) for i in range(DAYS)]
    pd.DataFrame(rows).to_excel(path, header=False, index=False, engine="openpyxl")
    return DAYS


# ---- Hotmart: one row per transaction, net revenue split producer / co-producer ----
HOTMART_PRODUCTS = [
    ("Curso Completo de Tráfego", 497.0, 0.7),
    ("Order Bump - Planilhas", 47.0, 0.2),
    ("Mentoria Upsell", 997.0, 0.1),
]
HOTMART_STATUSES = ["Aprovado"] * 8 + ["Completo"] * 2 + ["Reembolsado", "Cancelado", "Expirado"]


def hotmart_rows(d: date) -> list:
    weekly = 1.2 if d.weekday() < 5 else 0.9
    n = max(0, int(random.gauss(6, 2) * weekly))
    out = []
    for _ in range(n):
        product, price, _ = random.choices(HOTMART_PRODUCTS, weights=[p[2] for p in HOTMART_PRODUCTS])[0]
        net = round(price * random.uniform(0.82, 0.9), 2)
        coproducer = round(net * 0.3, 2) if product.startswith("Curso") else 0.0
        out.append({
            "Data da transação": f"{d:%d/%m/%Y} {random.randint(8, 23):02d}:{random.randint(0, 59):02d}:00",
            "DATA CORRIGIDA": f"{d:%d/%m/%Y}",
            "PRODUTO": product,
            "STATUS DA TRANSAÇÃO": random.choice(HOTMART_STATUSES),
            "FATURAMENTO LÍQUIDO DO(A) PRODUTOR(A)": round(net - coproducer, 2),
            "FATURAMENTO DO(A) COPRODUTOR(A)": coproducer,
        })
    return out


def write_hotmart(path: Path) -> int:
    rows = []
    for i in range(DAYS):
        rows.extend(hotmart_rows(START + timedelta(days=i)))
    pd.DataFrame(rows).to_excel(path, index=False, engine="openpyxl")
    return len(rows)


# ---- Kiwify: base price and fees, net computed downstream ----
KIWIFY_PRODUCTS = [("Curso Completo de Tráfego", 497.0), ("Aula Extra - Criativos", 67.0)]
KIWIFY_STATUSES = ["paid"] * 9 + ["refunded", "waiting_payment"]


def write_kiwify(path: Path) -> int:
    rows = []
    for i in range(DAYS):
        d = START + timedelta(days=i)
        for _ in range(max(0, int(random.gauss(2, 1)))):
            product, price = random.choice(KIWIFY_PRODUCTS)
            rows.append({
                "ID da venda": f"KW{len(rows) + 1:06d}",
                "Status": random.choice(KIWIFY_STATUSES),
                "Produto": product,
                "Preço base do produto": price,
                "Taxas": round(price * 0.0899 + 2.49, 2),
                "Data de Criação": f"{d:%Y-%m-%d} {random.randint(8, 23):02d}:{random.randint(0, 59):02d}",
            })
    pd.DataFrame(rows).to_csv(path, index=False)
    return len(rows)


def main() -> None:
    OUT_DIR.mkdir(parents=True, exist_ok=True)
    n_meta = write_meta_ads(OUT_DIR / "meta_ads.xlsx")
    n_hotmart = write_hotmart(OUT_DIR / "hotmart_sales.xlsx")
    n_kiwify = write_kiwify(OUT_DIR / "kiwify_sales.csv")
    print(f"Wrote {OUT_DIR}: meta_ads.xlsx ({n_meta} days), hotmart_sales.xlsx ({n_hotmart} rows), "
          f"kiwify_sales.csv ({n_kiwify} rows)")


if __name__ == "__main__":
    main()
