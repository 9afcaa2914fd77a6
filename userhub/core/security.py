# userhub/core/security.py
""""封装口令哈希/校验（passlib[bcrypt]）与 JWT 签发/校验（PyJWT, HS256）。

秘钥与过期时间由调用方传入（来自 Settings），本模块不读环境变量。
JWT 负载：sub=user_id / iat / exp。"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt  # PyJWT
from passlib.context import CryptContext

from userhub.core.errors import TokenError

ALGORITHM = "HS256"


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        self._ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plain: str) -> str:
        return self._ctx.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        try:
            return self._ctx.verify(plain, hashed)
        except (ValueError, TypeError):
            # 库里是无法识别的哈希：按校验失败处理
            return False


def create_access_token(subject: str, secret: str, expire_minutes: int) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expire_minutes)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM], options={"require": ["sub", "exp"]})
    except jwt.ExpiredSignatureError:
        raise TokenError("token expired")
    except jwt.PyJWTError:
        raise TokenError("invalid token")
    if not payload.get("sub"):
        raise TokenError("invalid token")
    return payload
