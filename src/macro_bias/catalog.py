"""
MACRO BIAS - Indicator Catalog

Display labels and categories for every canonical series.
"""

from __future__ import annotations

from macro_bias.aliases import SeriesId

CATEGORY_ORDER: tuple[str, ...] = (
    "Growth",
    "Labor",
    "Prices",
    "Monetary Policy",
    "Financial Conditions",
    "Sentiment & Housing",
    "Other",
)

LABELS: dict[SeriesId, str] = {
    SeriesId.T10Y2Y: "10Y-2Y Treasury Spread",
    SeriesId.T10Y3M: "10Y-3M Treasury Spread",
    SeriesId.T5YIE: "5Y Breakeven Inflation",
    SeriesId.NFCI: "Chicago Fed Financial Conditions (NFCI)",
    SeriesId.DTWEXBGS: "Broad Dollar Index",
    SeriesId.VIXCLS: "VIX",
    SeriesId.GDPC1: "Real GDP (YoY)",
    SeriesId.RSAFS: "Retail Sales (YoY)",
    SeriesId.INDPRO: "Industrial Production (YoY)",
    SeriesId.DGEXFI: "Durable Goods ex Transport (YoY)",
    SeriesId.TTLCONS: "Construction Spending (YoY)",
    SeriesId.TCU: "Capacity Utilization",
    SeriesId.USSLIND: "Leading Index (YoY)",
    SeriesId.PAYEMS: "Nonfarm Payrolls (change, k)",
    SeriesId.UNRATE: "Unemployment Rate (U3)",
    SeriesId.U6RATE: "Underemployment Rate (U6)",
    SeriesId.ICSA: "Initial Claims (4w avg)",
    SeriesId.JTSJOL: "JOLTS Job Openings",
    SeriesId.PCEPI: "PCE Inflation (YoY)",
    SeriesId.PCEPILFE: "Core PCE Inflation (YoY)",
    SeriesId.CPIAUCSL: "CPI Inflation (YoY)",
    SeriesId.CPILFESL: "Core CPI Inflation (YoY)",
    SeriesId.PPIACO: "PPI (YoY)",
    SeriesId.FEDFUNDS: "Fed Funds Rate",
    SeriesId.USPMI: "ISM Manufacturing PMI",
    SeriesId.PMI_SVCS: "ISM Services PMI",
    SeriesId.UMCSENT: "Michigan Consumer Sentiment",
    SeriesId.NFIB: "NFIB Small Business Optimism",
    SeriesId.HOUST: "Housing Starts",
    SeriesId.PERMIT: "Building Permits",
    SeriesId.NAHB: "NAHB Housing Market Index",
    SeriesId.CONCCONF: "Conference Board Consumer Confidence",
}

CATEGORIES: dict[SeriesId, str] = {
    SeriesId.GDPC1: "Growth",
    SeriesId.RSAFS: "Growth",
    SeriesId.INDPRO: "Growth",
    SeriesId.DGEXFI: "Growth",
    SeriesId.TTLCONS: "Growth",
    SeriesId.TCU: "Growth",
    SeriesId.USSLIND: "Growth",
    SeriesId.USPMI: "Growth",
    SeriesId.PMI_SVCS: "Growth",
    SeriesId.PAYEMS: "Labor",
    SeriesId.UNRATE: "Labor",
    SeriesId.U6RATE: "Labor",
    SeriesId.ICSA: "Labor",
    SeriesId.JTSJOL: "Labor",
    SeriesId.PCEPI: "Prices",
    SeriesId.PCEPILFE: "Prices",
    SeriesId.CPIAUCSL: "Prices",
    SeriesId.CPILFESL: "Prices",
    SeriesId.PPIACO: "Prices",
    SeriesId.T5YIE: "Prices",
    SeriesId.FEDFUNDS: "Monetary Policy",
    SeriesId.T10Y2Y: "Monetary Policy",
    SeriesId.T10Y3M: "Monetary Policy",
    SeriesId.NFCI: "Financial Conditions",
    SeriesId.VIXCLS: "Financial Conditions",
    SeriesId.DTWEXBGS: "Financial Conditions",
    SeriesId.UMCSENT: "Sentiment & Housing",
    SeriesId.NFIB: "Sentiment & Housing",
    SeriesId.HOUST: "Sentiment & Housing",
    SeriesId.PERMIT: "Sentiment & Housing",
    SeriesId.NAHB: "Sentiment & Housing",
    SeriesId.CONCCONF: "Sentiment & Housing",
}


def label_for(series_id: str) -> str:
    try:
        return LABELS[SeriesId(series_id)]
    except ValueError:
        return series_id


def category_for(series_id: str) -> str:
    try:
        return CATEGORIES[SeriesId(series_id)]
    except ValueError:
        return "Other"
