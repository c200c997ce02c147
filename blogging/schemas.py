from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from blogging.config import settings


# --- Post ---

class PostRequest(BaseModel):
    """
    Caller-supplied post fields.

    Everything is optional on purpose: nulls and blanks are rejected by
    the ``Post`` entity so they surface as 400s with the entity's message,
    not as request validation errors.
    """
    title: str | None = None
    content: str | None = None
    category: str | None = None
    tags: list[str | None] | None = None


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    category: str
    tags: list[str] = []
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> str:
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime(settings.TIMESTAMP_FORMAT)


# --- Health ---

class HealthResponse(BaseModel):
    status: str
    version: str
