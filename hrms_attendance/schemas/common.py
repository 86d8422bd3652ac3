"""
Shared schema base: Python attributes in snake_case, wire/document keys in camelCase.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every document and API payload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """camelCase dict as stored in the record store."""
        return self.model_dump(by_alias=True, mode="json")
