from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class CompletionSnapshot(BaseModel):
    member_id: str
    character_name: str
    completed_at: datetime
    metrics: dict
    goals: dict


class CompletionStatus(BaseModel):
    completed: bool
    snapshot: Optional[CompletionSnapshot] = None
