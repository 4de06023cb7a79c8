from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Union


class UserSignup(BaseModel):
    username: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserLogin(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    username: str = Field(..., min_length=1)
    email: EmailStr


class PasswordChange(BaseModel):
    currentPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=1)


class UserPublic(BaseModel):
    """Часть пользователя, которую можно отдавать клиенту (без password_hash)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str


class AuthResponse(BaseModel):
    token: str
    user: UserPublic


class UserResponse(BaseModel):
    user: UserPublic


class MessageResponse(BaseModel):
    message: str


class UserStats(BaseModel):
    lessonsCompleted: int
    exercisesAttempted: int
    correctAnswers: int
    accuracy: Union[str, int]  # "75.0" или 0, если попыток не было
    pointsEarned: int
