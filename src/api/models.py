"""Pydantic models for API request/response.

Request fields are optional at the schema level: required-field checks
belong to UserRules so that every missing field is reported together.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from domain.model.user import User, UserUpdate


class CreateUserRequest(BaseModel):
    """Request model for creating a user."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    user_name: Optional[str] = Field(None, alias="userName")

    def to_domain(self) -> User:
        return User(
            name=self.name or "",
            email=self.email or "",
            user_name=self.user_name or "",
            password=self.password or "",
        )


class UpdateUserRequest(BaseModel):
    """Request model for a partial user update. Omitted fields are left unchanged."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    user_name: Optional[str] = Field(None, alias="userName")

    def to_domain(self) -> UserUpdate:
        return UserUpdate(
            name=self.name,
            email=self.email,
            user_name=self.user_name,
            password=self.password,
        )


class UserResponse(BaseModel):
    """Public projection of a user. Never carries the password or its hash."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="User ID")
    name: str
    email: str
    user_name: str = Field(..., alias="userName")

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, user_name=user.user_name)


class CreatedResponse(BaseModel):
    """Response model for single user creation."""
    id: str = Field(..., description="Assigned user ID")


class BatchCreatedResponse(BaseModel):
    """Response model for CSV batch creation."""
    ids: list[str] = Field(..., description="Assigned user IDs in file order")


class ErrorDetail(BaseModel):
    """Body of the ``detail`` field on every error response."""
    code: str
    message: str
    details: Optional[str | list[dict]] = None
