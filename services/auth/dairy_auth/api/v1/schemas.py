from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

class RegisterPayload(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator('password')
    @classmethod
    def no_nul_bytes(cls, v: str) -> str:
        # bcrypt cannot hash NUL bytes
        if '\x00' in v:
            raise ValueError('password must not contain NUL characters')
        return v

class LoginPayload(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

class ForgotPasswordPayload(BaseModel):
    email: EmailStr

class UserRead(BaseModel):
    id: str
    name: str
    email: str
    role: str
    model_config = ConfigDict(from_attributes=True)

class AuthResponse(BaseModel):
    # The refresh token travels only in the cookie.
    access_token: str = Field(alias='accessToken')
    user: UserRead
    model_config = ConfigDict(populate_by_name=True)

class AccessTokenResponse(BaseModel):
    access_token: str = Field(alias='accessToken')
    model_config = ConfigDict(populate_by_name=True)

class MessageResponse(BaseModel):
    msg: str
