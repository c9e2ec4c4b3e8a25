from pydantic import BaseModel, Field, ConfigDict, TypeAdapter, field_validator
from typing import Optional, Literal, Union, Annotated
from datetime import datetime
import uuid

from utils.time import utcnow, to_naive_utc


class NotificationBase(BaseModel):
    """Fields shared by every notification; `type` selects the variant."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str  # Who receives the notification
    task_id: str

    message: str

    # When the notification logically applies (reminder fire time, deadline, or event time)
    scheduled_for: datetime = Field(default_factory=utcnow)

    # State
    read: bool = False
    sent: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("scheduled_for", "created_at")
    @classmethod
    def _naive_utc(cls, value):
        return to_naive_utc(value)


class ReminderNotification(NotificationBase):
    type: Literal['reminder'] = 'reminder'
    # Which offset (minutes before deadline) produced this reminder
    reminder_offset: int = Field(gt=0)


class OverdueNotification(NotificationBase):
    type: Literal['overdue'] = 'overdue'


class CommentNotification(NotificationBase):
    type: Literal['comment'] = 'comment'
    comment_id: Optional[str]


class MentionNotification(NotificationBase):
    type: Literal['mention'] = 'mention'
    comment_id: Optional[str]


class UpdateNotification(NotificationBase):
    type: Literal['update'] = 'update'


Notification = Annotated[
    Union[
        ReminderNotification,
        OverdueNotification,
        CommentNotification,
        MentionNotification,
        UpdateNotification,
    ],
    Field(discriminator="type"),
]

_notification_adapter = TypeAdapter(Notification)


def parse_notification(doc: dict) -> Notification:
    """Validate a stored notification document into its typed variant."""
    return _notification_adapter.validate_python(doc)
