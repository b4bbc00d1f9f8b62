"""Shared Pydantic base for client-facing payloads.

Wire format is camelCase (``stockSymbol``, ``sharesOwned``) while Python code
keeps snake_case attribute names. ``populate_by_name`` lets services and tests
build models with either spelling.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump with camelCase keys, ready for ApiResponse.data."""
        return self.model_dump(by_alias=True, mode="json")
