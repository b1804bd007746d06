"""
Shared schema base: camelCase on the wire, snake_case in Python
"""

from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema; reads ORM objects and accepts either field naming"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def strip_required(value: str) -> str:
    """Trim a required text field, rejecting blank values"""
    if not value.strip():
        raise ValueError("must not be blank")
    return value.strip()


NonBlankStr = Annotated[str, AfterValidator(strip_required)]


class SuccessResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
