from pydantic import BaseModel, Field, EmailStr, ConfigDict
from typing import Optional, Literal
from datetime import datetime
import uuid

from utils.time import utcnow

class UserModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: Optional[str] = None
    # Optional: users without an address are skipped by the email outbox
    email: Optional[EmailStr] = None
    role: Literal['Staff', 'Manager', 'Director'] = "Staff"
    department: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )
