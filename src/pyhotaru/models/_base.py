"""Base model for Hotaru wire payloads.

Every model that crosses the wire inherits from :class:`HotaruBaseModel`,
which maps the server's camelCase keys onto snake_case fields via
``alias_generator=to_camel`` and accepts either form on input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class HotaruBaseModel(BaseModel):
    """Base for Hotaru request/response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
