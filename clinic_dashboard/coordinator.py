"""The dashboard's working set and the complete/cancel action protocol.

An action runs confirm -> optimistic removal -> persist -> notify. A failed
persist is reconciled by reloading everything from the store; a failed
notification is only logged.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Union

from .config import PayloadStyle
from .errors import AmbiguousSelector, FetchFailed, NotificationFailed, PersistenceFailed, UnknownAppointment
from .filters import in_scope
from .grouping import group_appointments
from .models import (
    TERMINAL_STATUSES,
    Appointment,
    AppointmentStatus,
    ByFields,
    ById,
    DateBucket,
    GroupKey,
    matches,
)
from .notifications import build_payload
from .selection import SelectionState

logger = logging.getLogger(__name__)

Confirm = Callable[[Appointment, AppointmentStatus], bool]


class Repository(Protocol):
    async def fetch_scheduled(self) -> list[Appointment]: ...

    async def update_status(self, selector: Union[ById, ByFields], status: AppointmentStatus) -> None: ...


class NotificationSink(Protocol):
    async def send(self, action: AppointmentStatus, payload: dict[str, Any]) -> None: ...


class ActionOutcome(str, Enum):
    APPLIED = "applied"
    DECLINED = "declined"


def _always(appt: Appointment, action: AppointmentStatus) -> bool:
    return True


class ActionCoordinator:
    def __init__(
        self,
        repository: Repository,
        notifier: NotificationSink,
        *,
        confirm: Confirm = _always,
        window_days: Optional[int] = None,
        group_by: GroupKey = GroupKey.RAW,
        selection: Optional[SelectionState] = None,
        payload_style: Optional[PayloadStyle] = None,
        prefer_id: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.repository = repository
        self.notifier = notifier
        self.confirm = confirm
        self.window_days = window_days
        self.group_by = group_by
        self.selection = selection or SelectionState()
        self.payload_style = payload_style or PayloadStyle()
        self.prefer_id = prefer_id
        self.clock = clock

        # replaced wholesale, never edited in place
        self._appointments: tuple[Appointment, ...] = ()
        self.reference_now: datetime = clock()
        self.load_error: Optional[FetchFailed] = None
        self._pending: set[asyncio.Task] = set()

    @property
    def appointments(self) -> tuple[Appointment, ...]:
        return self._appointments

    def buckets(self) -> list[DateBucket]:
        return group_appointments(self._appointments, self.reference_now, key=self.group_by)

    async def load(self) -> list[DateBucket]:
        """Replace the working set with the store's scheduled rows."""
        now = self.clock()
        try:
            rows = await self.repository.fetch_scheduled()
        except FetchFailed as exc:
            logger.error(f"Loading appointments failed: {exc}")
            self.load_error = exc
            self._appointments = ()
            return []

        self.reference_now = now
        self.load_error = None
        self._appointments = tuple(in_scope(rows, now, self.window_days))
        buckets = self.buckets()
        self.selection.ensure_default(buckets)
        logger.info(f"Loaded {len(self._appointments)} appointments in {len(buckets)} day(s)")
        return buckets

    def find(self, selector: Union[ById, ByFields]) -> Appointment:
        found = [a for a in self._appointments if matches(selector, a)]
        if not found:
            raise UnknownAppointment(f"no scheduled appointment matches {selector.model_dump()}")
        if len(found) > 1:
            raise AmbiguousSelector(f"{len(found)} scheduled appointments match {selector.model_dump()}")
        return found[0]

    def selector_for(self, appt: Appointment) -> Union[ById, ByFields]:
        if self.prefer_id and appt.id is not None:
            return ById(id=appt.id)
        selector = ByFields.of(appt)
        if sum(1 for a in self._appointments if matches(selector, a)) > 1:
            raise AmbiguousSelector(
                f"{appt.patient_name} has more than one appointment on {appt.raw_date} at {appt.start_time}"
            )
        return selector

    async def apply(
        self,
        appt: Appointment,
        action: AppointmentStatus,
        *,
        confirm: Optional[Confirm] = None,
        reason: Optional[str] = None,
    ) -> ActionOutcome:
        if action not in TERMINAL_STATUSES:
            raise ValueError(f"{action.value} is not a terminal status")
        if not any(a is appt for a in self._appointments):
            raise UnknownAppointment(f"{appt.patient_name} is not in the current schedule")
        selector = self.selector_for(appt)

        if not (confirm or self.confirm)(appt, action):
            logger.info(f"{action.value} declined for {appt.patient_name}")
            return ActionOutcome.DECLINED

        self._appointments = tuple(a for a in self._appointments if a is not appt)

        try:
            await self.repository.update_status(selector, action)
        except PersistenceFailed as exc:
            logger.error(f"Marking {appt.patient_name} as {action.value} failed, reloading: {exc}")
            await self.load()
            raise

        logger.info(f"{appt.patient_name} ({appt.raw_date} {appt.start_time}) marked {action.value}")
        payload = build_payload(appt, action, self.payload_style, self.clock(), reason=reason)
        task = asyncio.create_task(self._notify(action, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return ActionOutcome.APPLIED

    async def _notify(self, action: AppointmentStatus, payload: dict[str, Any]) -> None:
        try:
            await self.notifier.send(action, payload)
        except NotificationFailed as exc:
            logger.warning(f"Notification not delivered: {exc}")
        except Exception:
            logger.exception(f"Notification for {action.value} crashed")

    async def drain(self) -> None:
        """Wait for in-flight notifications. Only used on shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
