"""Async client for the appointments table behind Supabase's PostgREST API."""
from __future__ import annotations

import logging
from typing import Union

import httpx
from pydantic import ValidationError

from .errors import FetchFailed, PersistenceFailed
from .models import Appointment, AppointmentStatus, ByFields, ById

logger = logging.getLogger(__name__)

COLUMNS = [
    "id", "patient_name", "email", "phone_number", "patient_symptoms",
    "report_url", "date", "status", "start_time",
]


def _filters(selector: Union[ById, ByFields]) -> dict[str, str]:
    if isinstance(selector, ById):
        return {"id": f"eq.{selector.id}"}
    return {
        "patient_name": f"eq.{selector.patient_name}",
        "date": "is.null" if selector.date is None else f"eq.{selector.date}",
        "start_time": f"eq.{selector.start_time}",
    }


class AppointmentRepository:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "appointments",
        *,
        include_id: bool = True,
        timeout: float = 15.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.columns = COLUMNS if include_id else [c for c in COLUMNS if c != "id"]
        self.timeout = timeout

    @property
    def _url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        headers.update(extra)
        return headers

    async def fetch_scheduled(self) -> list[Appointment]:
        """Return every row with status Scheduled, in whatever order the store gives."""
        params = {"select": ",".join(self.columns), "status": f"eq.{AppointmentStatus.SCHEDULED.value}"}
        try:
            async with httpx.AsyncClient(http2=True, timeout=self.timeout) as client:
                resp = await client.get(self._url, headers=self._headers(), params=params)
                resp.raise_for_status()
                rows = resp.json()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchFailed(f"could not load appointments: {exc}") from exc
        except ValueError as exc:
            raise FetchFailed(f"appointments response is not JSON: {exc}") from exc
        if not isinstance(rows, list):
            raise FetchFailed(f"expected a list of rows, got {type(rows).__name__}")

        appointments = []
        for row in rows:
            try:
                appointments.append(Appointment.model_validate(row))
            except ValidationError as exc:
                ref = row.get("id") if isinstance(row, dict) else row
                logger.warning(f"Skipping malformed appointment row {ref!r}: {exc}")
        logger.info(f"Fetched {len(appointments)} scheduled appointments")
        return appointments

    async def update_status(self, selector: Union[ById, ByFields], status: AppointmentStatus) -> None:
        """Set ``status`` on the row(s) the selector addresses. Zero matched rows is a failure."""
        headers = self._headers(**{"Content-Type": "application/json", "Prefer": "return=representation"})
        try:
            async with httpx.AsyncClient(http2=True, timeout=self.timeout) as client:
                resp = await client.patch(
                    self._url,
                    headers=headers,
                    params=_filters(selector),
                    json={"status": status.value},
                )
                resp.raise_for_status()
                updated = resp.json()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise PersistenceFailed(f"could not update appointment: {exc}") from exc
        except ValueError as exc:
            raise PersistenceFailed(f"update response is not JSON: {exc}") from exc

        if not isinstance(updated, list) or not updated:
            raise PersistenceFailed(f"no appointment matched {selector.model_dump()}")
