from pydantic import BaseModel, Field
from typing import Optional


class InteractionScores(BaseModel):
    """Scores of one finished session, already computed by the practice call"""
    overall_performance: float = Field(ge=0, le=100)
    engagement: float = Field(ge=0, le=100)
    objection_handling: float = Field(ge=0, le=100)
    information_gathering: float = Field(ge=0, le=100)
    program_explanation: float = Field(ge=0, le=100)
    closing_skills: float = Field(ge=0, le=100)
    overall_effectiveness: float = Field(ge=0, le=100)


class InteractionCreate(BaseModel):
    member_id: Optional[str] = Field(default=None, alias="memberId")
    character_name: Optional[str] = Field(default=None, alias="characterName")
    team_id: Optional[str] = Field(default=None, alias="teamId")
    metrics: InteractionScores

    class Config:
        populate_by_name = True


class AggregateMetrics(BaseModel):
    """Rounded rolling means over the latest sessions; total_calls may be below the window"""
    overall_performance: int = 0
    engagement: int = 0
    objection_handling: int = 0
    information_gathering: int = 0
    program_explanation: int = 0
    closing_skills: int = 0
    overall_effectiveness: int = 0
    total_calls: int = 0
