from pydantic import AliasChoices, BaseModel, Field
from typing import Optional
from datetime import datetime


class GoalConfig(BaseModel):
    team_id: Optional[str] = None
    window_size: int = Field(alias="number_of_calls_average", gt=0)
    threshold: int = Field(alias="overall_performance_goal", ge=0, le=100)
    last_updated: Optional[datetime] = None

    class Config:
        populate_by_name = True


class GoalUpdate(BaseModel):
    # Accepts the camelCase names and the ones GoalConfig is read back with
    team_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("teamId", "team_id")
    )
    past_calls_count: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("pastCallsCount", "number_of_calls_average", "past_calls_count"),
        gt=0
    )
    overall_performance_goal: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("overallPerformanceGoal", "overall_performance_goal"),
        ge=0,
        le=100
    )
