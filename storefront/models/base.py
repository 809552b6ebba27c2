"""Shared pydantic configuration for API payloads"""

from pydantic import BaseModel, ConfigDict


class APIModel(BaseModel):
    """Lenient base: unknown fields are kept, numeric ids become strings"""

    model_config = ConfigDict(
        extra="allow",
        coerce_numbers_to_str=True,
        populate_by_name=True,
    )
