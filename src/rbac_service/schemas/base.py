"""Base schema configuration for API models.

- APIRequest: incoming request bodies; unknown fields are ignored.
- APIResponse: outgoing bodies; unknown fields are rejected.

Both accept snake_case or camelCase on input and serialize to camelCase.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _BaseSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        serialize_by_alias=True,
    )


class APIRequest(_BaseSchema):
    """Base class for incoming API request schemas."""

    model_config = ConfigDict(extra="ignore")


class APIResponse(_BaseSchema):
    """Base class for outgoing API response schemas."""

    model_config = ConfigDict(extra="forbid")
