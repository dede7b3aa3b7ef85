from __future__ import annotations

import pandas as pd
import streamlit as st
import altair as alt
from pymongo import MongoClient

import certifi
from dotenv import dotenv_values

# =====================================================
# Page config
# =====================================================
st.set_page_config(page_title="Global Layoffs Analytics", layout="wide")
st.title("📉 Global Layoffs Analytics Dashboard")

# =====================================================
# MongoDB connection (strict: read from .env only)
# =====================================================
_env = dotenv_values(".env")
MONGO_URI = _env.get("MONGO_URI")
MONGO_DB = _env.get("MONGO_DB") or "layoffs"

if not MONGO_URI:
    st.error(
        "Missing `MONGO_URI` in `.env`. Please create a `.env` file with `MONGO_URI=<your mongodb uri>` (do not put secrets in source control)."
    )
    st.stop()

try:
    client = MongoClient(
        MONGO_URI,
        tls=True,
        tlsCAFile=certifi.where(),
        serverSelectionTimeoutMS=30000,
        socketTimeoutMS=30000,
        connectTimeoutMS=30000,
    )
    # fail fast: ensure the client can reach the server
    client.admin.command("ping")
    db = client[MONGO_DB]
except Exception as exc:  # pragma: no cover - runtime failure handling
    st.error(f"Unable to connect to MongoDB: {exc}")
    st.stop()

# =====================================================
# Helpers
# =====================================================
def load_collection(name: str) -> pd.DataFrame:
    """Load an entire Gold collection into a pandas DataFrame for display."""
    docs = list(db[name].find({}, {"_id": 0}))
    return pd.DataFrame(docs) if docs else pd.DataFrame()


def top_bar_chart(df: pd.DataFrame, label: str, value: str, title: str):
    """Bar chart sorted descending by `value`."""
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X(f"{label}:N", sort=alt.SortField(value, order="descending"), title=None),
            y=alt.Y(f"{value}:Q", title=title),
            tooltip=[f"{label}:N", f"{value}:Q"],
        )
        .properties(height=320)
    )

# =====================================================
# SECTION 0 — OVERVIEW
# =====================================================
st.header("📌 Overview")

clean_count = db.clean_layoffs.count_documents({})
metrics = load_collection("gold_max_metrics")
dates = load_collection("gold_date_range")

c1, c2, c3 = st.columns(3)
with c1:
    st.metric("Clean Records", clean_count)
with c2:
    st.metric(
        "Largest Single Layoff",
        int(metrics.loc[0, "max_total_laid_off"])
        if not metrics.empty and pd.notna(metrics.loc[0, "max_total_laid_off"])
        else "N/A",
    )
with c3:
    if dates.empty:
        st.metric("Date Range", "N/A")
    else:
        lo = pd.to_datetime(dates.loc[0, "min_date"]).strftime("%Y-%m")
        hi = pd.to_datetime(dates.loc[0, "max_date"]).strftime("%Y-%m")
        st.metric("Date Range", f"{lo} → {hi}")

st.divider()

# =====================================================
# SECTION 1 — MONTHLY TREND
# =====================================================
st.header("📈 Monthly Layoffs and Rolling Total")

df_monthly = load_collection("gold_monthly_rolling_total")

if df_monthly.empty:
    st.warning("Monthly data not available. Run the gold pipeline.")
else:
    df_monthly["month_start"] = pd.to_datetime(
        df_monthly[["year", "month"]].assign(day=1)
    )
    df_monthly = df_monthly.sort_values("month_start")

    measure = st.radio("Measure", ["laid_off", "rolling_total"], horizontal=True)
    chart = (
        alt.Chart(df_monthly)
        .mark_line(point=True)
        .encode(
            x=alt.X("month_start:T", title="Month"),
            y=alt.Y(f"{measure}:Q", title="Employees laid off"),
            tooltip=["month_start:T", "laid_off:Q", "rolling_total:Q"],
        )
        .properties(height=320)
    )
    st.altair_chart(chart, width="stretch")

st.divider()

# =====================================================
# SECTION 2 — BREAKDOWNS
# =====================================================
st.header("🏢 Breakdowns")

selection = st.selectbox(
    "Dataset",
    ["Companies", "Industries", "Countries", "Stages"],
    index=0,
)
sources = {
    "Companies": ("gold_top_companies_by_total", "company"),
    "Industries": ("gold_industry_totals", "industry"),
    "Countries": ("gold_country_totals", "country"),
    "Stages": ("gold_stage_totals", "stage"),
}
collection, label = sources[selection]
df_top = load_collection(collection)

if df_top.empty:
    st.info(f"{selection} data not available.")
else:
    df_top["total_laid_off"] = pd.to_numeric(df_top["total_laid_off"], errors="coerce")
    df_top = df_top.dropna(subset=["total_laid_off"])
    df_top = df_top.sort_values("total_laid_off", ascending=False).head(20)
    st.altair_chart(
        top_bar_chart(df_top, label, "total_laid_off", "Employees laid off"),
        width="stretch",
    )
    st.dataframe(df_top, width="stretch")

st.divider()

# =====================================================
# SECTION 3 — TOP COMPANIES PER YEAR
# =====================================================
st.header("🏆 Top Companies per Year")

df_ranked = load_collection("gold_top_companies_per_year")

if df_ranked.empty:
    st.info("Ranking data not available.")
else:
    years = sorted(df_ranked["year"].dropna().astype(int).unique())
    year = st.select_slider("Year", options=years, value=years[-1])
    st.dataframe(
        df_ranked[df_ranked["year"] == year].sort_values(["ranking", "company"]),
        width="stretch",
    )

# =====================================================
# Footer
# =====================================================
st.caption("Global layoffs • MongoDB • Dask • Streamlit • Gold-Layer Analytics")
