""""模块职能：

定义 users 表（口令哈希直接存于用户行，不单独建 credentials 表）

UserRow：id / name / email(唯一) / password / created_at / updated_at

email 唯一约束是并发注册下的最终兜底（服务层预检只是快速路径）"""

# userhub/core/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, UniqueConstraint
from sqlalchemy.orm import declarative_base


def _uuid() -> str: return str(uuid.uuid4())


def utcnow() -> datetime: return datetime.now(timezone.utc)


Base = declarative_base()

EMAIL_UNIQUE_CONSTRAINT = "uq_users_email"


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(64), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    password = Column(String(255), nullable=False)                  # bcrypt 哈希
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (UniqueConstraint("email", name=EMAIL_UNIQUE_CONSTRAINT),)
