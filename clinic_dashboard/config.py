from __future__ import annotations

import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .models import GroupKey

load_dotenv()


class PayloadStyle(BaseModel):
    """Shape of the webhook body sent after an action."""
    identifier: Literal["id", "slot"] = "id"
    timestamp: Literal["per_action", "combined"] = "per_action"
    include_record: bool = False


class Settings(BaseModel):
    supabase_url: str = ""
    supabase_key: str = ""
    appointments_table: str = "appointments"
    done_webhook: Optional[str] = None
    cancel_webhook: Optional[str] = None
    window_days: Optional[int] = None  # None = every scheduled appointment
    group_by: GroupKey = GroupKey.RAW
    accordion: bool = False
    auto_advance: bool = False
    prefer_id: bool = True
    payload: PayloadStyle = PayloadStyle()
    http_timeout: float = 15.0

    @classmethod
    def from_env(cls) -> "Settings":
        window = os.getenv("DASHBOARD_WINDOW", "all").strip().lower()
        return cls(
            supabase_url=os.getenv("SUPABASE_URL", "").rstrip("/"),
            supabase_key=os.getenv("SUPABASE_ANON_KEY", ""),
            appointments_table=os.getenv("APPOINTMENTS_TABLE", "appointments"),
            done_webhook=os.getenv("N8N_DONE_WEBHOOK") or None,
            cancel_webhook=os.getenv("N8N_CANCEL_WEBHOOK") or None,
            window_days=None if window in ("", "all") else int(window),
            group_by=GroupKey(os.getenv("DASHBOARD_GROUP_BY", "raw")),
            accordion=os.getenv("DASHBOARD_ACCORDION", "0") == "1",
            auto_advance=os.getenv("DASHBOARD_AUTO_ADVANCE", "0") == "1",
            prefer_id=os.getenv("DASHBOARD_PREFER_ID", "1") == "1",
            payload=PayloadStyle(
                identifier=os.getenv("PAYLOAD_IDENTIFIER", "id"),
                timestamp=os.getenv("PAYLOAD_TIMESTAMP", "per_action"),
                include_record=os.getenv("PAYLOAD_INCLUDE_RECORD", "0") == "1",
            ),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "15")),
        )
