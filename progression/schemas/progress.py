from pydantic import BaseModel, Field
from typing import Optional, List, Dict

from progression.schemas.metrics import AggregateMetrics
from progression.schemas.goals import GoalConfig


class PairRequest(BaseModel):
    member_id: Optional[str] = Field(default=None, alias="memberId")
    character_name: Optional[str] = Field(default=None, alias="characterName")

    class Config:
        populate_by_name = True


class MarkCompleteRequest(PairRequest):
    team_id: Optional[str] = Field(default=None, alias="teamId")


class ResetResult(BaseModel):
    success: bool = True
    deleted: Dict[str, int]


class CharacterState(BaseModel):
    name: str
    position: int
    unlocked: bool
    completed: bool = False
    metrics: Optional[AggregateMetrics] = None
    loading: bool = False  # metrics could not be read this time


class ChainState(BaseModel):
    member_id: str
    team_id: Optional[str] = None
    goals: Optional[GoalConfig] = None
    characters: List[CharacterState]
