"""Board Pydantic schemas."""

from pydantic import BaseModel

from stagenotes.schemas.note import UtcDatetime


class BoardCreate(BaseModel):
    title: str


class LockUpdate(BaseModel):
    locked: bool


class BoardOut(BaseModel):
    id: str
    code: str
    title: str
    locked: bool
    created_at: UtcDatetime

    model_config = {"from_attributes": True}
