from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.user import UserRead


class OTPRequest(BaseModel):
    mobile_number: str = Field(min_length=1, max_length=32)


class OTPRequested(BaseModel):
    mobile_number: str


class OTPVerify(BaseModel):
    mobile_number: str = Field(min_length=1, max_length=32)
    code: str = Field(pattern=r"^[0-9]{6}$")


class SessionRead(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserRead
