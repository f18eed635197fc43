from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Task(BaseModel):
    # unknown keys in stored records are kept and written back
    model_config = ConfigDict(extra="allow")

    id: str
    date: str
    startTime: str
    endTime: str = ""
    category: str = ""
    description: str
    completed: bool = False

    @field_validator("endTime", "category", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return "" if value is None else value


class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: str
    startTime: str
    description: str
    endTime: Optional[str] = None
    category: Optional[str] = None

    @field_validator("date", "startTime", "description")
    @classmethod
    def not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value


class TaskUpdate(BaseModel):
    """Partial task body; only keys present in the request are applied."""

    model_config = ConfigDict(extra="ignore")

    date: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
