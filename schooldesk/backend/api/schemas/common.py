# schooldesk/backend/api/schemas/common.py
from pydantic import BaseModel, ConfigDict

from ...modules.naming import to_camel_case


class CamelModel(BaseModel):
    """
    Base for every request/response body. Fields are snake_case in Python and
    camelCase on the wire; either spelling is accepted on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel_case,
        populate_by_name=True,
        from_attributes=True,
    )


def reject_null(value):
    """
    Field validator for partial updates: a field may be left out, but an
    explicit null is refused when the column behind it is NOT NULL.
    Validators do not run on defaults, so an omitted field never gets here.
    """
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


class MessageResponse(CamelModel):
    message: str
