from datetime import datetime

from pydantic import Field, field_validator

from surveykit.schemas.base import CamelSchema


class UserUpdate(CamelSchema):
    email: str | None = Field(default=None, max_length=320)
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None

    @field_validator('email')
    @classmethod
    def blank_email_means_none(cls, v: str | None) -> str | None:
        """An empty email clears the address instead of claiming ``""``."""
        if v is None:
            return None
        return v.strip() or None


class UserOut(CamelSchema):
    id: str
    email: str | None
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None
    created_at: datetime | None
    updated_at: datetime | None
