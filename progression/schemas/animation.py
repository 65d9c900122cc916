from pydantic import BaseModel, Field


class AnimationStatus(BaseModel):
    shown: bool
    unlocked: bool
    should_show: bool = Field(alias="shouldShow")

    class Config:
        populate_by_name = True


class AnimationMarked(BaseModel):
    success: bool = True
    shown: bool = True
