"""
MACRO BIAS - Macro Release Interpretation & Trading Bias Engine

Turns the latest value of each macro release into:
- a policy-stance posture per indicator (Hawkish / Neutral / Dovish)
- a weighted market regime (RISK ON / RISK OFF / Neutral)
- a per-instrument trading bias with a confidence grade (Alta / Media / Baja)
- qualitative scenarios and institutional setups

Design Principles:
- Deterministic, rule-based, stateless per invocation
- No price or technical analysis
- No forecasting, no backtesting
- Missing data degrades to neutral output, never raises
"""

__version__ = "1.0.0"
