# Shared utilities: formatters
from cryptolens.utils.formatters import (
    format_open_time,
    format_price,
    format_price_change,
    format_volume,
)

__all__ = [
    "format_open_time",
    "format_price",
    "format_price_change",
    "format_volume",
]
