"""
Core math modules

Математические примитивы и численные защиты движка.
"""

from quant_engine.core.math.numerical_safeguards import (
    # Epsilon constants
    DECIMAL_QUANTIZE_PRECISION,
    EPS_CALC,
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    MAX_TOKEN_DECIMALS,
    # Decimal conversion & validation
    quantize_down,
    to_decimal,
    validate_amount,
    validate_fraction,
    # Float helpers
    clamp,
    is_close,
    is_valid_float,
    is_zero,
    safe_divide,
)

__all__ = [
    # Epsilon constants
    "DECIMAL_QUANTIZE_PRECISION",
    "EPS_CALC",
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_FLOAT_COMPARE_REL",
    "MAX_TOKEN_DECIMALS",
    # Decimal conversion & validation
    "quantize_down",
    "to_decimal",
    "validate_amount",
    "validate_fraction",
    # Float helpers
    "clamp",
    "is_close",
    "is_valid_float",
    "is_zero",
    "safe_divide",
]
