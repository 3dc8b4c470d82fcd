"""Async HTTP client for the booking API.

Retries and endpoint fallback live in one :class:`RetryPolicy` resolved at
construction time. The client never rewrites its own configuration based on
which endpoint happened to answer.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import httpx

from venue_booking.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with a cap, applied per base URL."""

    max_retries: int = 3
    backoff_base: float = 0.5
    backoff_max: float = 8.0
    retry_statuses: frozenset[int] = field(default_factory=lambda: frozenset({502, 503, 504}))

    def delay(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt`` (0-based)."""
        return min(self.backoff_max, self.backoff_base * (2**attempt))


class ApiError(Exception):
    """The API answered with a non-retryable error status."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class VenueBookingClient:
    """Client for the venue booking API.

    Usage::

        async with VenueBookingClient.from_settings(token=access_token) as client:
            booking = await client.submit_booking({...}, idempotency_key=key)
    """

    def __init__(
        self,
        base_url: str,
        *,
        fallback_urls: list[str] | None = None,
        policy: RetryPolicy | None = None,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep=asyncio.sleep,
    ) -> None:
        self._base_urls = [base_url.rstrip("/")] + [u.rstrip("/") for u in fallback_urls or []]
        self._policy = policy or RetryPolicy()
        self._sleep = sleep
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(headers=headers, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, token: str | None = None, **kwargs: Any) -> "VenueBookingClient":
        policy = RetryPolicy(
            max_retries=settings.api_max_retries,
            backoff_base=settings.api_backoff_base_seconds,
            backoff_max=settings.api_backoff_max_seconds,
        )
        return cls(
            settings.api_base_url,
            fallback_urls=settings.api_fallback_urls,
            policy=policy,
            token=token,
            timeout=settings.api_timeout_seconds,
            **kwargs,
        )

    async def __aenter__(self) -> "VenueBookingClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        last_error: Exception | None = None

        for base_url in self._base_urls:
            for attempt in range(self._policy.max_retries + 1):
                if attempt:
                    await self._sleep(self._policy.delay(attempt - 1))
                try:
                    response = await self._http.request(method, f"{base_url}{path}", **kwargs)
                except httpx.TransportError as exc:
                    logger.warning("%s %s%s failed (attempt %d): %s", method, base_url, path, attempt + 1, exc)
                    last_error = exc
                    continue

                if response.status_code in self._policy.retry_statuses:
                    logger.warning(
                        "%s %s%s returned %d (attempt %d)", method, base_url, path, response.status_code, attempt + 1
                    )
                    last_error = ApiError(response.status_code, response.text)
                    continue

                if response.is_error:
                    try:
                        detail = response.json().get("detail", response.text)
                    except ValueError:
                        detail = response.text
                    raise ApiError(response.status_code, str(detail))

                return response.json()

            logger.warning("Giving up on %s after %d attempts", base_url, self._policy.max_retries + 1)

        assert last_error is not None
        raise last_error

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def submit_booking(self, payload: dict, idempotency_key: str | None = None) -> dict:
        """Submit a booking and return it.

        An idempotency key is generated when none is given, so that the
        client's own retries cannot create duplicate bookings.
        """
        key = idempotency_key or uuid.uuid4().hex
        data = await self._request("POST", "/api/bookings", json=payload, headers={"Idempotency-Key": key})
        return data["booking"]

    async def list_bookings(self) -> list[dict]:
        data = await self._request("GET", "/api/bookings")
        return data["items"]

    async def cancel_booking(self, booking_id: str | uuid.UUID) -> dict:
        data = await self._request("POST", f"/api/bookings/{booking_id}/cancel")
        return data["booking"]

    async def estimate_price(
        self,
        venue_id: str | uuid.UUID,
        start_date: date,
        end_date: date | None = None,
        guest_count: int = 0,
    ) -> dict:
        payload = {
            "date": start_date.isoformat(),
            "end_date": end_date.isoformat() if end_date else None,
            "guest_count": guest_count,
        }
        return await self._request("POST", f"/api/venues/{venue_id}/price-estimate", json=payload)
