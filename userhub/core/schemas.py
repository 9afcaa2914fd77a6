# userhub/core/schemas.py
"""
请求/响应与领域记录（Pydantic）。

- User：存储层返回的用户记录；password 为哈希，序列化时排除
- UserDraft：创建用户的入参（口令已哈希）
- RegisterInput / UpdateUserInput / LoginInput：HTTP 入参校验（长度、邮箱格式、两次口令一致）
- ListFilter：列表查询条件（全部可选，仅在本次请求内存在）
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, model_validator

NAME_MIN, NAME_MAX = 4, 10
PASSWORD_MIN = 6


def _as_utc(v: datetime) -> datetime:
    # SQLite 读回的是 naive 值，按 UTC 补上时区
    return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    password: str = Field(exclude=True, repr=False)
    created_at: UtcDatetime
    updated_at: UtcDatetime


class UserDraft(BaseModel):
    name: str
    email: str
    password: str  # 已哈希


class ListFilter(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


class RegisterInput(BaseModel):
    name: str = Field(min_length=NAME_MIN, max_length=NAME_MAX)
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN)
    password2: str = Field(min_length=PASSWORD_MIN)

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.password2:
            raise ValueError("password and password2 do not match")
        return self


class UpdateUserInput(BaseModel):
    name: Optional[str] = Field(default=None, min_length=NAME_MIN, max_length=NAME_MAX)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=PASSWORD_MIN)
    password2: Optional[str] = Field(default=None, min_length=PASSWORD_MIN)

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password is not None and self.password != self.password2:
            raise ValueError("password and password2 do not match")
        return self

    def is_empty(self) -> bool:
        return self.name is None and self.email is None and self.password is None


class LoginInput(BaseModel):
    email: EmailStr
    password: str


class TokenPayload(BaseModel):
    access_token: str
    token_type: str = "Bearer"


class Identity(BaseModel):
    """authorize() 解析出的身份；路由层再回库取最新 User。"""
    user_id: str
