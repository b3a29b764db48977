# modules/common/schemas.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; both spellings accepted on input"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageMeta(CamelModel):
    total_pages: int
    current_page: int
    total: int


class MessageOut(BaseModel):
    message: str
