from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProfileIn(BaseModel):
    name: str = Field(..., min_length=1)
    timezone: str = "UTC"


class EventIn(BaseModel):
    profiles: List[str] = Field(default_factory=list)
    timezone: str
    start: str
    end: str


class EventUpdate(BaseModel):
    """
    Sparse update for an event. Only fields present in the request body count;
    a field sent as null is treated as not sent.
    """

    model_config = ConfigDict(populate_by_name=True)

    profiles: Optional[List[str]] = None
    start: Optional[str] = None
    end: Optional[str] = None
    timezone: Optional[str] = None
    updated_by: Optional[str] = Field(None, alias="updatedBy")

    @field_validator("timezone")
    @classmethod
    def blank_timezone_is_absent(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    def provided(self) -> Dict[str, Any]:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}
