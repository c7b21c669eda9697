# Candle sources: Binance REST klines and synthetic series
from cryptolens.data.binance_client import BinanceClient, parse_kline
from cryptolens.data.synthetic import generate_synthetic_candles

__all__ = [
    "BinanceClient",
    "generate_synthetic_candles",
    "parse_kline",
]
