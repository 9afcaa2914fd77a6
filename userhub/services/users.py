"""
模块职能：
- 用户编排：register / get / update / delete / list。
- 只抛两类领域错误：DuplicateUserEmailError、EmptyFieldsError；
  存储层错误（NotFound / DataStore）原样透传。

并发说明：
- email 预检是快速路径，并发注册的最终裁决来自 users.email 唯一约束
  （存储层把约束冲突映射为 DuplicateUserEmailError）。

日志：
- user_register_duplicate / user_registered / user_updated / user_deleted
"""
from __future__ import annotations

from typing import Dict, List

from userhub.core.errors import DuplicateUserEmailError, EmptyFieldsError, NotFoundError
from userhub.core.query import normalize_page
from userhub.core.schemas import ListFilter, RegisterInput, UpdateUserInput, User, UserDraft
from userhub.core.security import PasswordHasher
from userhub.infra.logger import emit
from userhub.services.user_store import UserStore


class UserService:
    def __init__(self, users: UserStore, hasher: PasswordHasher):
        self.users = users
        self.hasher = hasher

    def _email_owner(self, email: str):
        try:
            return self.users.get_by_email(email)
        except NotFoundError:
            return None

    def register(self, inp: RegisterInput) -> User:
        if self._email_owner(inp.email) is not None:
            emit("user_register_duplicate", email=inp.email)
            raise DuplicateUserEmailError(inp.email)
        user = self.users.create(UserDraft(
            name=inp.name,
            email=inp.email,
            password=self.hasher.hash(inp.password),
        ))
        emit("user_registered", user_id=user.id)
        return user

    def get(self, user_id: str) -> User:
        return self.users.get_by_id(user_id)

    def update(self, user_id: str, inp: UpdateUserInput) -> User:
        if inp.is_empty():
            raise EmptyFieldsError()

        current = self.users.get_by_id(user_id)
        changes: Dict[str, str] = {}
        if inp.name is not None:
            changes["name"] = inp.name
        if inp.email is not None and inp.email != current.email:
            owner = self._email_owner(inp.email)
            if owner is not None and owner.id != current.id:
                raise DuplicateUserEmailError(inp.email)
            changes["email"] = inp.email
        if inp.password is not None:
            changes["password"] = self.hasher.hash(inp.password)

        updated = self.users.update(current.model_copy(update=changes))
        emit("user_updated", user_id=user_id, fields=sorted(changes))
        return updated

    def delete(self, user_id: str) -> User:
        user = self.users.delete(user_id)
        emit("user_deleted", user_id=user_id)
        return user

    def list(self, opts: ListFilter) -> List[User]:
        limit, offset = normalize_page(opts.limit, opts.offset)
        return self.users.list(opts.model_copy(update={"limit": limit, "offset": offset}))
