# userhub/api/users.py
"""
用户 API（挂载前缀 /users）
------------------------------------
- POST   /users                注册（公开）
- GET    /users?name=&email=&limit=&offset=   列表（需 Bearer）
- GET    /users/{user_id}      详情（需 Bearer）
- PUT    /users/{user_id}      部分更新（需 Bearer；未出现的字段保持不变）
- DELETE /users/{user_id}      硬删除，返回被删除的记录（需 Bearer）

入参校验（长度、邮箱格式、两次口令一致、列表的 name/email 过滤值、limit/offset 范围）在调用服务之前完成，
失败直接返回 400 信封。limit 超过 100 时按 100 处理。
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import EmailStr

from userhub.api.deps.auth import get_current_user, get_user_service
from userhub.api.responses import ok
from userhub.core.schemas import NAME_MAX, NAME_MIN, ListFilter, RegisterInput, UpdateUserInput, User
from userhub.infra.logger import emit
from userhub.services.users import UserService

router = APIRouter()


@router.post("")
def register(body: RegisterInput, svc: UserService = Depends(get_user_service)):
    return ok(svc.register(body))


@router.get("")
def list_users(
    name: Optional[str] = Query(default=None, min_length=NAME_MIN, max_length=NAME_MAX),
    # 与注册入参同样规范化（域名小写），才能与存储值相等比较
    email: Optional[EmailStr] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1),
    offset: Optional[int] = Query(default=None, ge=0),
    svc: UserService = Depends(get_user_service),
    actor: User = Depends(get_current_user),
):
    rows = svc.list(ListFilter(name=name, email=email, limit=limit, offset=offset))
    emit("api_users_list", actor=actor.id, count=len(rows))
    return ok(rows)


@router.get("/{user_id}")
def get_user(user_id: str, svc: UserService = Depends(get_user_service), actor: User = Depends(get_current_user)):
    return ok(svc.get(user_id))


@router.put("/{user_id}")
def update_user(
    user_id: str,
    body: UpdateUserInput,
    svc: UserService = Depends(get_user_service),
    actor: User = Depends(get_current_user),
):
    return ok(svc.update(user_id, body))


@router.delete("/{user_id}")
def delete_user(user_id: str, svc: UserService = Depends(get_user_service), actor: User = Depends(get_current_user)):
    emit("api_users_delete", actor=actor.id, user_id=user_id)
    return ok(svc.delete(user_id))
