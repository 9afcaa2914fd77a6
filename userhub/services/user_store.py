"""
模块职能：
- 用户持久化网关（UserStore 接口）：create / get_by_id / get_by_email / update / delete / list。
- SqlUserStore：SQLAlchemy 实现，每次调用一个 Session，所有值参数绑定。
- MemoryUserStore：进程内实现（测试 / 本地调试），语义与 SQL 实现一致。

错误：
- 无记录 → NotFoundError
- email 唯一约束冲突 → DuplicateUserEmailError（唯一约束是权威来源）；其他完整性错误按 DataStoreError 处理
- 其他数据库异常 → DataStoreError（原样上抛，不重试）

日志：
- user_row_insert / user_row_update / user_row_delete / db_error
"""
from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, List, Protocol

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from userhub.core.errors import AppError, DataStoreError, DuplicateUserEmailError, NotFoundError
from userhub.core.models import EMAIL_UNIQUE_CONSTRAINT, UserRow, utcnow
from userhub.core.query import build_filter
from userhub.core.schemas import ListFilter, User, UserDraft
from userhub.infra.logger import emit, emit_error

_COLUMNS = "id, name, email, password, created_at, updated_at"


class UserStore(Protocol):
    def create(self, draft: UserDraft) -> User: ...
    def get_by_id(self, user_id: str) -> User: ...
    def get_by_email(self, email: str) -> User: ...
    def update(self, user: User) -> User: ...
    def delete(self, user_id: str) -> User: ...
    def list(self, opts: ListFilter) -> List[User]: ...


def _not_found(user_id: str) -> NotFoundError:
    return NotFoundError(f"user not found: {user_id}")


def _is_email_conflict(e: IntegrityError) -> bool:
    # PostgreSQL 报约束名，SQLite 报 "UNIQUE constraint failed: users.email"
    msg = str(e.orig)
    return EMAIL_UNIQUE_CONSTRAINT in msg or "UNIQUE constraint failed: users.email" in msg


class SqlUserStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except AppError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            emit_error("db_error", error=str(e))
            raise DataStoreError("data store error") from e
        finally:
            db.close()

    @staticmethod
    def _commit(db: Session, email: str):
        try:
            db.commit()
        except IntegrityError as e:
            if not _is_email_conflict(e):
                raise
            db.rollback()
            raise DuplicateUserEmailError(email) from e

    def create(self, draft: UserDraft) -> User:
        with self._session() as db:
            row = UserRow(name=draft.name, email=draft.email, password=draft.password)
            db.add(row)
            self._commit(db, draft.email)
            db.refresh(row)
            emit("user_row_insert", user_id=row.id)
            return User.model_validate(row)

    def get_by_id(self, user_id: str) -> User:
        with self._session() as db:
            row = db.get(UserRow, user_id)
            if row is None:
                raise _not_found(user_id)
            return User.model_validate(row)

    def get_by_email(self, email: str) -> User:
        with self._session() as db:
            row = db.execute(select(UserRow).where(UserRow.email == email)).scalar_one_or_none()
            if row is None:
                raise NotFoundError("user not found")
            return User.model_validate(row)

    def update(self, user: User) -> User:
        with self._session() as db:
            row = db.get(UserRow, user.id)
            if row is None:
                raise _not_found(user.id)
            row.name = user.name
            row.email = user.email
            row.password = user.password
            row.updated_at = utcnow()
            self._commit(db, user.email)
            db.refresh(row)
            emit("user_row_update", user_id=row.id)
            return User.model_validate(row)

    def delete(self, user_id: str) -> User:
        with self._session() as db:
            row = db.get(UserRow, user_id)
            if row is None:
                raise _not_found(user_id)
            deleted = User.model_validate(row)
            db.delete(row)
            db.commit()
            emit("user_row_delete", user_id=user_id)
            return deleted

    def list(self, opts: ListFilter) -> List[User]:
        frag = build_filter(opts)
        # 片段里只有白名单列名与 :param 占位符
        sql = f"SELECT {_COLUMNS} FROM users"
        if frag.where:
            sql += f" {frag.where}"
        sql += f" ORDER BY created_at, id {frag.pagination}"
        with self._session() as db:
            rows = db.execute(select(UserRow).from_statement(text(sql)), frag.params).scalars().all()
            return [User.model_validate(r) for r in rows]


class MemoryUserStore:
    def __init__(self):
        self._rows: Dict[str, User] = {}
        self._lock = threading.Lock()

    def _email_taken(self, email: str, exclude_id: str = "") -> bool:
        return any(u.email == email and u.id != exclude_id for u in self._rows.values())

    def create(self, draft: UserDraft) -> User:
        with self._lock:
            if self._email_taken(draft.email):
                raise DuplicateUserEmailError(draft.email)
            now = utcnow()
            user = User(id=str(uuid.uuid4()), name=draft.name, email=draft.email,
                        password=draft.password, created_at=now, updated_at=now)
            self._rows[user.id] = user
            return user

    def get_by_id(self, user_id: str) -> User:
        with self._lock:
            user = self._rows.get(user_id)
        if user is None:
            raise _not_found(user_id)
        return user

    def get_by_email(self, email: str) -> User:
        with self._lock:
            for user in self._rows.values():
                if user.email == email:
                    return user
        raise NotFoundError("user not found")

    def update(self, user: User) -> User:
        with self._lock:
            if user.id not in self._rows:
                raise _not_found(user.id)
            if self._email_taken(user.email, exclude_id=user.id):
                raise DuplicateUserEmailError(user.email)
            updated = user.model_copy(update={"updated_at": utcnow()})
            self._rows[user.id] = updated
            return updated

    def delete(self, user_id: str) -> User:
        with self._lock:
            user = self._rows.pop(user_id, None)
        if user is None:
            raise _not_found(user_id)
        return user

    def list(self, opts: ListFilter) -> List[User]:
        frag = build_filter(opts)
        with self._lock:
            rows = [
                u for u in self._rows.values()
                if (opts.name is None or u.name == opts.name)
                and (opts.email is None or u.email == opts.email)
            ]
        rows.sort(key=lambda u: (u.created_at, u.id))
        return rows[frag.offset:frag.offset + frag.limit]
