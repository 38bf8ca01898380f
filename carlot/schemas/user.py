from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserSchema(BaseModel):
    username: Optional[str] = Field(None, max_length=100)
    email: EmailStr = Field(...)
    password: str = Field(..., min_length=8)


class UserLoginSchema(BaseModel):
    email: EmailStr = Field(...)
    password: str = Field(...)


class ImpersonationStatus(BaseModel):
    """Shape of the impersonation check; admin fields only when impersonating."""
    model_config = ConfigDict(populate_by_name=True)

    is_impersonating: bool = Field(..., alias="isImpersonating")
    admin_id: Optional[str] = Field(None, alias="adminId")
    admin_username: Optional[str] = Field(None, alias="adminUsername")

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
