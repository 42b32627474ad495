"""Exercise schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ExerciseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    muscle_group: str | None = Field(None, max_length=100)


class ExerciseCreate(ExerciseBase):
    pass


class ExerciseUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    muscle_group: str | None = Field(None, max_length=100)


class ExerciseRead(ExerciseBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID


class ExerciseRef(BaseModel):
    """Minimal exercise info for embedding in set and template responses (id + name only)."""

    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)
