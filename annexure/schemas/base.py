"""Base model shared by every wire-facing schema."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys.

    Python code uses snake_case attributes; the remote extraction payload and
    the HTTP API use camelCase. Unknown keys are ignored, never stored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
