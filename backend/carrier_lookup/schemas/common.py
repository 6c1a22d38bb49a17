"""Common schema base used across the API.

JSON bodies use camelCase keys (`carrierId`, `transitTime`, `createdAt`);
snake_case is accepted on input as well.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageOut(CamelModel):
    message: str
