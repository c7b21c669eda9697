"""
Cryptolens Binance Data Client

Fetches historical klines from the Binance spot REST API and converts them to
validated Candle models. Batch only: a live chart re-fetches and re-runs the
analysis on the updated series.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

import httpx
import structlog
from pydantic import ValidationError

from cryptolens.config import get_settings
from cryptolens.exceptions import MarketDataError
from cryptolens.models import Candle, TimeInterval

log = structlog.get_logger(__name__)


# The REST API has no 1s klines; the chart falls back to 1m.
_API_INTERVALS = {TimeInterval.S1: TimeInterval.M1}


def parse_kline(row: Sequence[Any]) -> Candle:
    """Convert one Binance kline array to a Candle.

    Layout: [openTime, open, high, low, close, volume, closeTime,
    quoteAssetVolume, numberOfTrades, ...]; prices arrive as strings.

    Raises:
        ValueError: the row is too short or a field is not numeric.
        pydantic.ValidationError: the prices violate low <= open/close <= high.
    """
    if len(row) < 9:
        raise ValueError(f"kline row has {len(row)} fields, expected at least 9")

    return Candle(
        open_time=int(row[0]),
        open=float(row[1]),
        high=float(row[2]),
        low=float(row[3]),
        close=float(row[4]),
        volume=float(row[5]),
        close_time=int(row[6]),
        quote_asset_volume=float(row[7]),
        number_of_trades=int(row[8]),
    )


class BinanceClient:
    """Wrapper around the Binance /klines endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._base_url = (base_url or settings.binance_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.http_timeout
        self._default_limit = settings.kline_limit
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def get_klines(
        self,
        symbol: str,
        interval: Union[TimeInterval, str] = TimeInterval.H1,
        limit: Optional[int] = None,
    ) -> list[Candle]:
        """Fetch up to `limit` most recent candles, oldest first.

        Raises:
            MarketDataError: transport failure, non-2xx status, or a payload
                that does not parse into valid candles.
        """
        requested = TimeInterval(interval)
        api_interval = _API_INTERVALS.get(requested, requested)
        params = {
            "symbol": symbol.upper(),
            "interval": api_interval.value,
            "limit": limit or self._default_limit,
        }

        try:
            async with self._client() as client:
                resp = await client.get("/klines", params=params)
                resp.raise_for_status()
                rows = resp.json()
        except httpx.HTTPStatusError as e:
            log.warning(
                "binance.klines_http_error",
                symbol=symbol, status=e.response.status_code,
            )
            raise MarketDataError(symbol, e.response.text, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            log.warning("binance.klines_transport_error", symbol=symbol, error=str(e))
            raise MarketDataError(symbol, str(e)) from e

        if not isinstance(rows, list):
            raise MarketDataError(symbol, "unexpected kline payload")

        try:
            candles = [parse_kline(row) for row in rows]
        except (ValueError, TypeError, ValidationError) as e:
            log.warning("binance.klines_malformed", symbol=symbol, error=str(e))
            raise MarketDataError(symbol, f"malformed kline: {e}") from e

        log.info(
            "binance.klines_fetched",
            symbol=params["symbol"], interval=params["interval"], candles=len(candles),
        )
        return candles
