"""
Chart Data Fetcher
Fetches OHLCV candles from the chart API for indicator computation.

    GET {base_url}/candles/{symbol}?timeframe=1d&limit=1000
    Authorization: Bearer <token>

The response is either {"candles": [...]} or a bare list of candle objects
with timestamp/open/high/low/close/volume fields.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from ..continuous.data_types import CandleSeries
from ..errors import DataUnavailableError, IndicatorError
from ..indicator_config import RequestConfig
from ..utils.retry import RetryError, retry_async

logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class ChartAPIError(IndicatorError):
    """Non-retryable error response from the chart API."""

    def __init__(self, status_code: int, message: str, response_text: str = ""):
        self.status_code = status_code
        self.message = message
        self.response_text = response_text
        super().__init__(f"Chart API error {status_code}: {message}")


class ChartTransientError(ChartAPIError):
    """Retryable status (rate limit or server error)."""


class ChartTimeoutError(ChartAPIError):
    """Raised when request times out."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(0, f"Request timed out after {timeout}s")


class ChartConnectionError(ChartAPIError):
    """Raised when connection fails."""

    def __init__(self, original_error: Exception):
        self.original_error = original_error
        super().__init__(0, f"Connection error: {original_error}")


RETRYABLE_ERRORS = (ChartTransientError, ChartTimeoutError, ChartConnectionError)


# =============================================================================
# FETCHER
# =============================================================================


class ChartDataFetcher:
    """
    Fetches candle history for a symbol/timeframe.

    Example:
        async with ChartDataFetcher() as fetcher:
            candles = await fetcher.get_candles("INFY", "1d", limit=500)
    """

    VALID_TIMEFRAMES = [
        "1m",
        "3m",
        "5m",
        "15m",
        "30m",
        "1h",
        "2h",
        "4h",
        "1d",
        "1w",
        "1M",
    ]

    MAX_LIMIT = 5000

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        request_config: Optional[RequestConfig] = None,
    ):
        self._session = session
        self._owns_session = session is None
        self._config = request_config or RequestConfig()

    async def __aenter__(self):
        if self._session is None:
            timeout = aiohttp.ClientTimeout(
                total=self._config.timeout_total, connect=self._config.timeout_connect
            )
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        return headers

    async def _get_once(self, url: str, params: Dict[str, Any]) -> Any:
        """Single GET attempt; maps transport and status failures to ChartAPIError."""
        try:
            async with self._session.get(url, params=params, headers=self._headers()) as response:
                if response.status in self._config.retry_on_status:
                    text = await response.text()
                    raise ChartTransientError(response.status, text, text)

                if response.status != 200:
                    text = await response.text()
                    raise ChartAPIError(response.status, text, text)

                try:
                    return await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise ChartAPIError(response.status, f"invalid JSON body: {e}") from e

        except asyncio.TimeoutError as e:
            raise ChartTimeoutError(self._config.timeout_total) from e
        except aiohttp.ClientError as e:
            raise ChartConnectionError(e) from e

    async def _get(self, url: str, params: Dict[str, Any]) -> Any:
        """
        GET with retry on transient failures.

        Raises:
            ChartAPIError: For non-retryable API errors
            DataUnavailableError: When retries are exhausted
        """
        if self._session is None:
            raise RuntimeError(
                "Session not initialized. Use 'async with ChartDataFetcher()' "
                "or pass a session to __init__."
            )

        logger.debug("GET %s params=%s", url, params)
        fetch = retry_async(
            max_attempts=self._config.max_retries,
            exceptions=RETRYABLE_ERRORS,
            base_delay=self._config.retry_base_delay,
            max_delay=self._config.retry_max_delay,
        )(self._get_once)

        try:
            return await fetch(url, params)
        except RetryError as e:
            raise DataUnavailableError(
                f"candle source unavailable for {url}: {e.last_exception}",
                e.last_exception,
            ) from e

    @staticmethod
    def _candle_rows(payload: Any) -> List[Dict[str, Any]]:
        if isinstance(payload, dict):
            payload = payload.get("candles")
        if not isinstance(payload, list):
            raise ChartAPIError(200, f"unexpected payload shape: {type(payload).__name__}")
        return payload

    async def get_candles(
        self, symbol: str, timeframe: str = "1d", limit: int = 1000
    ) -> CandleSeries:
        """
        Fetch candle history, oldest first.

        Args:
            symbol: Instrument symbol (e.g., 'INFY' or 'BTC/USDT')
            timeframe: One of VALID_TIMEFRAMES
            limit: Number of candles (capped at MAX_LIMIT)

        Returns:
            Validated CandleSeries

        Raises:
            ValueError: Unknown timeframe or non-positive limit
            ChartAPIError: Non-retryable API error or malformed payload
            DataUnavailableError: Source unreachable after retries
            InvalidCandleError / UnsortedSeriesError: Malformed candle data
        """
        if timeframe not in self.VALID_TIMEFRAMES:
            raise ValueError(f"Invalid timeframe. Must be one of: {self.VALID_TIMEFRAMES}")
        if limit < 1:
            raise ValueError("limit must be >= 1")

        url = f"{self._config.base_url.rstrip('/')}/candles/{symbol.strip()}"
        params = {"timeframe": timeframe, "limit": min(limit, self.MAX_LIMIT)}
        payload = await self._get(url, params)

        candles = CandleSeries.from_dicts(self._candle_rows(payload))
        logger.info("Fetched %d %s candles for %s", len(candles), timeframe, symbol)
        return candles
