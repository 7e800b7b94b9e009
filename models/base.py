# models/base.py

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    API payloads are camelCase (objectType, canCreate, ...) while rows are
    snake_case. Fields are declared snake_case and accept either spelling.
    Dump with ``by_alias=True`` for responses.
    """

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }

    def to_api(self) -> dict:
        return self.model_dump(by_alias=True)
