from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ORMModel(BaseModel):
    # JSON uses camelCase keys; snake_case field names are accepted on input too.
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


ItemT = TypeVar("ItemT")


class Page(ORMModel, Generic[ItemT]):
    items: List[ItemT]
    total_pages: int
    current_page: int
    total: int


class MessageResponse(ORMModel):
    message: str
