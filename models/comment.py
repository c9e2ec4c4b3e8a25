from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
import uuid

from utils.time import utcnow


class CommentModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    task_id: str
    author_id: str
    body: str = Field(min_length=1, max_length=5000)
    mentions: List[str] = Field(default_factory=list)  # Resolved user ids
    edited_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(populate_by_name=True)
