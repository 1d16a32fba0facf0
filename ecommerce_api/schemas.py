from typing import Optional

from pydantic import BaseModel, ConfigDict, conint


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: int
    name: str
    description: str
    price: float


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: int
    name: str
    email: str
    status: str
    role: str


class Pagination(BaseModel):
    page: conint(ge=1)
    limit: conint(ge=1)
    total: conint(ge=0)


class FieldError(BaseModel):
    field: str
    message: str


class StackTrace(BaseModel):
    stack: Optional[str] = None
