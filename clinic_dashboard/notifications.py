"""Outbound webhooks fired after an appointment is completed or cancelled."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from .config import PayloadStyle
from .errors import NotificationFailed
from .models import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = {
    AppointmentStatus.COMPLETED: "completed_at",
    AppointmentStatus.CANCELLED: "cancelled_at",
}


def build_payload(
    appt: Appointment,
    action: AppointmentStatus,
    style: PayloadStyle,
    at: datetime,
    reason: Optional[str] = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    if style.include_record:
        payload.update(appt.model_dump(mode="json", by_alias=True))

    payload["patient_name"] = appt.patient_name
    payload["email"] = appt.email
    if style.identifier == "id":
        payload["appointment_id"] = appt.id
    else:
        payload["date"] = appt.raw_date
        payload["start_time"] = appt.start_time
    payload["status"] = action.value
    if reason:
        payload["reason"] = reason

    field = "action_at" if style.timestamp == "combined" else TIMESTAMP_FIELDS[action]
    payload[field] = at.isoformat()
    return payload


class WebhookNotifier:
    """Posts JSON to one endpoint per action. Delivery is best effort."""

    def __init__(self, done_url: Optional[str], cancel_url: Optional[str], *, timeout: float = 15.0):
        self.endpoints = {
            AppointmentStatus.COMPLETED: done_url,
            AppointmentStatus.CANCELLED: cancel_url,
        }
        self.timeout = timeout

    async def send(self, action: AppointmentStatus, payload: dict[str, Any]) -> None:
        url = self.endpoints.get(action)
        if not url:
            logger.warning(f"No webhook configured for {action.value}; notification skipped")
            return
        try:
            async with httpx.AsyncClient(http2=True, timeout=self.timeout) as client:
                resp = await client.post(url, json=payload)
                resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NotificationFailed(f"{action.value} webhook failed: {exc}") from exc
