"""Base DTO class."""

from pydantic import BaseModel, ConfigDict


class DTO(BaseModel):
    """Base class for application DTOs (immutable, buildable from ORM rows)."""

    model_config = ConfigDict(frozen=True, from_attributes=True)
