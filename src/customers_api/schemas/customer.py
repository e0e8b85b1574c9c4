"""Customer response model."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator


class CustomerOut(BaseModel):
    """Customer as returned by the service and serialized to JSON."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    active: bool
    created: datetime

    @field_validator("created")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite drops the offset; timestamps are always written in UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
