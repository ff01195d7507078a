"""Shared pydantic base for analysis entities and report payloads."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    """Frozen model that serializes with camelCase keys.

    Python code constructs and reads fields by their snake_case names;
    artifacts are written with ``model_dump(mode="json", by_alias=True)``.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict:
        """Return the JSON-ready, camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)
