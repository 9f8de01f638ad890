import logging
import os
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from .config import Settings
from .coordinator import ActionCoordinator, ActionOutcome
from .errors import AmbiguousSelector, PersistenceFailed, UnknownAppointment
from .models import TERMINAL_STATUSES, Appointment, AppointmentStatus, DateBucket, Selector
from .notifications import WebhookNotifier
from .repository import AppointmentRepository
from .selection import SelectionState

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


class ScheduleResp(BaseModel):
    reference_date: date
    selected: Optional[str] = None
    buckets: list[DateBucket]
    error: Optional[str] = None


class SelectRequest(BaseModel):
    key: str


class ActionRequest(BaseModel):
    selector: Selector
    action: AppointmentStatus
    confirm: bool = False
    reason: Optional[str] = None


class ActionResp(BaseModel):
    outcome: ActionOutcome


def build_coordinator(settings: Settings) -> ActionCoordinator:
    repository = AppointmentRepository(
        settings.supabase_url,
        settings.supabase_key,
        settings.appointments_table,
        include_id=settings.prefer_id,
        timeout=settings.http_timeout,
    )
    notifier = WebhookNotifier(settings.done_webhook, settings.cancel_webhook, timeout=settings.http_timeout)
    return ActionCoordinator(
        repository,
        notifier,
        window_days=settings.window_days,
        group_by=settings.group_by,
        selection=SelectionState(accordion=settings.accordion, auto_advance=settings.auto_advance),
        payload_style=settings.payload,
        prefer_id=settings.prefer_id,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    coordinator = build_coordinator(Settings.from_env())
    app.state.coordinator = coordinator
    await coordinator.load()
    yield
    await coordinator.drain()


app = FastAPI(title="Clinic Dashboard", lifespan=lifespan)


def get_coordinator(request: Request) -> ActionCoordinator:
    return request.app.state.coordinator


def _schedule(coordinator: ActionCoordinator) -> ScheduleResp:
    return ScheduleResp(
        reference_date=coordinator.reference_now.date(),
        selected=coordinator.selection.current_selection(),
        buckets=coordinator.buckets(),
        error=str(coordinator.load_error) if coordinator.load_error else None,
    )


@app.get("/schedule", response_model=ScheduleResp)
async def get_schedule(coordinator: ActionCoordinator = Depends(get_coordinator)):
    """Day buckets in display order plus the current selection."""
    return _schedule(coordinator)


@app.post("/schedule/reload", response_model=ScheduleResp)
async def reload_schedule(coordinator: ActionCoordinator = Depends(get_coordinator)):
    await coordinator.load()
    return _schedule(coordinator)


@app.put("/selection", response_model=ScheduleResp)
async def select_day(req: SelectRequest, coordinator: ActionCoordinator = Depends(get_coordinator)):
    coordinator.selection.select(req.key)
    return _schedule(coordinator)


@app.post("/selection/toggle", response_model=ScheduleResp)
async def toggle_day(req: SelectRequest, coordinator: ActionCoordinator = Depends(get_coordinator)):
    coordinator.selection.toggle(req.key)
    return _schedule(coordinator)


@app.get("/selection/appointments", response_model=list[Appointment])
async def selected_appointments(coordinator: ActionCoordinator = Depends(get_coordinator)):
    """Appointments of the selected day; empty when the selected day is gone."""
    bucket = coordinator.selection.resolve(coordinator.buckets())
    return bucket.appointments if bucket else []


@app.post("/appointments/action", response_model=ActionResp)
async def act_on_appointment(req: ActionRequest, coordinator: ActionCoordinator = Depends(get_coordinator)):
    if req.action not in TERMINAL_STATUSES:
        raise HTTPException(status_code=422, detail="action must be Completed or Cancelled")
    try:
        appt = coordinator.find(req.selector)
        outcome = await coordinator.apply(appt, req.action, confirm=lambda *_: req.confirm, reason=req.reason)
    except UnknownAppointment as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except AmbiguousSelector as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except PersistenceFailed as exc:
        raise HTTPException(status_code=502, detail=f"Update not saved, schedule reloaded: {exc}")
    return ActionResp(outcome=outcome)
