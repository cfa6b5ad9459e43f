from pydantic import BaseModel, ConfigDict

from safetool.schemas.base import CamelModel

class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""

class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    username: str | None = None
    roles: list[str] = []

class LoginResponse(CamelModel):
    token: str
    user: str
