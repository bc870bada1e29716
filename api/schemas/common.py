"""Common shared schemas used across multiple domains."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Coordinate ranges are checked by passage.validation so that a bad
# position is a 400, not a schema error.
class Position(CamelModel):
    lat: float = Field(..., allow_inf_nan=False)
    lng: float = Field(..., allow_inf_nan=False)


class NamedPosition(Position):
    name: str = ""
