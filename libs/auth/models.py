from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated caller decoded from a bearer JWT.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: str = "authenticated"

    model_config = {"populate_by_name": True}

    @property
    def is_admin(self) -> bool:
        return self.role in ("service_role", "admin")
