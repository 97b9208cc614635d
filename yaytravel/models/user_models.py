# yaytravel/models/user_models.py

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any


# -------------------------
# Registration model
# -------------------------
class CreateUserIn(BaseModel):
    FirstName: str = Field(min_length=1)
    LastName: str = ""
    email: EmailStr
    phoneNumber: str = ""
    password: str = Field(min_length=6)
    country: Optional[str] = None
    city: Optional[str] = None


# -------------------------
# Token response
# -------------------------
class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


# -------------------------
# Profile response
# -------------------------
class UserOut(BaseModel):
    id: str
    email: EmailStr
    FirstName: str
    LastName: str
    name: str
    phoneNumber: str
    country: Optional[str] = None
    city: Optional[str] = None
    createdAt: str


def user_out(row: Dict[str, Any]) -> UserOut:
    first = row.get("first_name") or ""
    last = row.get("last_name") or ""
    return UserOut(
        id=str(row["id"]),
        email=row["email"],
        FirstName=first,
        LastName=last,
        name=f"{first} {last}".strip(),
        phoneNumber=row.get("phone_number") or "",
        country=row.get("country"),
        city=row.get("city"),
        createdAt=row["created_at"],
    )
