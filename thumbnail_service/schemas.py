"""
Shared Pydantic V2 base and envelope schemas.

Request fields carry storage keys verbatim: no whitespace stripping.
"""
from pydantic import BaseModel, ConfigDict


class APIModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
    )


class OkResponse(APIModel):
    ok: bool = True
