"""
Booking backend client.

The booking backend owns appointment persistence, conflict detection against
other bookings and confirmation dispatch. This client only forwards a
validated submission:

    POST  {base}/api/appointments         create
    PATCH {base}/api/appointments/{id}    update
"""

from __future__ import annotations

import logging

import httpx

from bookline.config import settings
from bookline.errors import BookingBackendError
from bookline.middleware.metrics import appointments_forwarded_total
from bookline.scheduling.form import AppointmentSubmission

logger = logging.getLogger(__name__)


class BookingBackendClient:

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.booking_backend_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.booking_backend_timeout
        self._transport = transport

    async def create_appointment(self, business_id: str, submission: AppointmentSubmission) -> dict:
        return await self._send("POST", "/api/appointments", business_id, submission, mode="create")

    async def update_appointment(
        self, business_id: str, appointment_id: int, submission: AppointmentSubmission,
    ) -> dict:
        return await self._send(
            "PATCH", f"/api/appointments/{appointment_id}", business_id, submission, mode="update",
        )

    async def _send(
        self,
        method: str,
        path: str,
        business_id: str,
        submission: AppointmentSubmission,
        *,
        mode: str,
    ) -> dict:
        payload = submission.to_backend_payload()
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport,
            ) as client:
                resp = await client.request(
                    method, path, json=payload, headers={"X-Business-Id": business_id},
                )
        except httpx.TimeoutException as e:
            appointments_forwarded_total.labels(mode=mode, outcome="timeout").inc()
            logger.warning("Booking backend timed out on %s %s: %s", method, path, e)
            raise BookingBackendError(504, "Booking backend timed out") from e
        except httpx.HTTPError as e:
            appointments_forwarded_total.labels(mode=mode, outcome="unreachable").inc()
            logger.warning("Booking backend unreachable on %s %s: %s", method, path, e)
            raise BookingBackendError(502, "Booking backend unavailable") from e

        if resp.status_code >= 400:
            appointments_forwarded_total.labels(mode=mode, outcome="rejected").inc()
            raise BookingBackendError(resp.status_code, _error_message(resp))

        appointments_forwarded_total.labels(mode=mode, outcome="ok").inc()
        logger.info("Appointment %s forwarded for business %s", mode, business_id)
        return resp.json() if resp.content else {}


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or body)
    return str(body)
