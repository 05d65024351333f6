"""Authentication schemas."""
from pydantic import BaseModel, Field, field_validator

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class TokenResponse(BaseModel):
    """Response containing the signed token after register or login."""
    token: str
    email: str


class RegisterRequest(BaseModel):
    """Register request body. Emails are compared exactly, case included."""
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    """Login request body."""
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)
