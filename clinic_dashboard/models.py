from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class AppointmentStatus(str, Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


TERMINAL_STATUSES = (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED)


class GroupKey(str, Enum):
    """How appointments are keyed into day buckets."""
    RAW = "raw"          # the stored date string, as typed
    DISPLAY = "display"  # label rendered from the normalized date


class Appointment(BaseModel):
    """A row of the appointments table. Only ``status`` is ever written back."""
    id: Optional[Union[int, str]] = None
    patient_name: str
    phone_number: Optional[str] = None
    email: Optional[str] = None
    symptoms: Optional[str] = Field(default=None, alias="patient_symptoms")
    report_url: Optional[str] = None  # opaque, may be a data URI
    raw_date: Optional[str] = Field(default=None, alias="date")
    start_time: str = ""
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

    model_config = {
        "populate_by_name": True
    }


class DateBucket(BaseModel):
    key: str
    day: date
    appointments: list[Appointment]


class ById(BaseModel):
    kind: Literal["id"] = "id"
    id: Union[int, str]


class ByFields(BaseModel):
    """Structural address. Only valid while the triple is unique among scheduled rows."""
    kind: Literal["fields"] = "fields"
    patient_name: str
    date: Optional[str] = None
    start_time: str

    @classmethod
    def of(cls, appt: Appointment) -> "ByFields":
        return cls(patient_name=appt.patient_name, date=appt.raw_date, start_time=appt.start_time)


Selector = Annotated[Union[ById, ByFields], Field(discriminator="kind")]


def matches(selector: Union[ById, ByFields], appt: Appointment) -> bool:
    if isinstance(selector, ById):
        return appt.id is not None and str(appt.id) == str(selector.id)
    return (
        appt.patient_name == selector.patient_name
        and appt.raw_date == selector.date
        and appt.start_time == selector.start_time
    )
