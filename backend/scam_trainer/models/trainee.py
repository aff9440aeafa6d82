"""Trainee profile collected at onboarding."""

from pydantic import BaseModel, Field, field_validator


class TraineeProfile(BaseModel):
    """Who is being trained. Used to adapt the counterpart's language."""

    name: str = Field(..., min_length=1, max_length=100)
    age: int = Field(..., ge=1, le=120)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v
