from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional, Literal, List, Any
from datetime import datetime
import json
import math
import uuid

from constants import DEFAULT_REMINDERS_MIN, MAX_REMINDER_OFFSET_MIN
from utils.time import utcnow, to_naive_utc


def normalize_reminder_offsets(value: Any) -> List[int]:
    """
    Coerce incoming reminder offsets (list, single number, JSON array string or CSV string)
    into a deduplicated list of positive minutes (at most one year), largest first.
    """
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            value = [part.strip() for part in value.split(",")]

    items = value if isinstance(value, (list, tuple, set)) else [value]
    offsets = set()
    for item in items:
        try:
            minutes = float(item)
        except (TypeError, ValueError):
            continue
        if math.isfinite(minutes) and 1 <= minutes <= MAX_REMINDER_OFFSET_MIN:
            offsets.add(int(minutes))
    return sorted(offsets, reverse=True)


class TaskModel(BaseModel):
    # Core Fields
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    description: Optional[str] = ""

    # State
    status: Literal['To Do', 'In Progress', 'Done'] = 'To Do'
    priority: Literal['Low', 'Medium', 'High'] = 'Low'

    # Relations
    assigned_project: Optional[str] = None
    assigned_team_members: List[str] = Field(default_factory=list)
    created_by: str

    # Timing
    deadline: Optional[datetime] = None
    # Minutes before deadline
    reminder_offsets: List[int] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True
    )

    @field_validator("reminder_offsets", mode="before")
    @classmethod
    def _coerce_offsets(cls, value):
        return normalize_reminder_offsets(value)

    @field_validator("deadline", "created_at", "updated_at")
    @classmethod
    def _naive_utc(cls, value):
        return to_naive_utc(value)

    @model_validator(mode="after")
    def _apply_default_offsets(self):
        # Offsets only make sense relative to a deadline
        if self.deadline is None:
            self.reminder_offsets = []
        elif not self.reminder_offsets:
            self.reminder_offsets = list(DEFAULT_REMINDERS_MIN)
        return self
