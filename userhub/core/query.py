# userhub/core/query.py
""""模块职能：

把稀疏的列表查询条件（name / email / limit / offset）组装成安全的 SQL 片段

- 列名只来自固定白名单，值一律以 :param 绑定，绝不拼接客户端字符串
- 无条件时不输出 WHERE；N 个条件用 AND 连接，末尾无多余 AND
- 分页：OFFSET 缺省 0，LIMIT 缺省 20，上限 100"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from userhub.core.errors import ValidationError
from userhub.core.schemas import ListFilter

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_OFFSET = 0

# 允许参与等值过滤的列（顺序即输出顺序）
FILTER_COLUMNS = ("name", "email")


@dataclass(frozen=True)
class QueryFragment:
    where: str
    pagination: str
    limit: int
    offset: int
    params: Dict[str, object] = field(default_factory=dict)

    def render(self) -> str:
        parts = [p for p in (self.where, self.pagination) if p]
        return " " + " ".join(parts)


def normalize_page(limit: Optional[int], offset: Optional[int]) -> Tuple[int, int]:
    if limit is None:
        limit = DEFAULT_LIMIT
    if limit < 1:
        raise ValidationError("limit must be >= 1")
    if offset is None:
        offset = DEFAULT_OFFSET
    if offset < 0:
        raise ValidationError("offset must be >= 0")
    return min(limit, MAX_LIMIT), offset


def build_filter(opts: ListFilter) -> QueryFragment:
    predicates = []
    params: Dict[str, object] = {}
    for column in FILTER_COLUMNS:
        value = getattr(opts, column)
        if value is None:
            continue
        predicates.append(f"{column} = :{column}")
        params[column] = value

    where = "WHERE " + " AND ".join(predicates) if predicates else ""

    limit, offset = normalize_page(opts.limit, opts.offset)
    params["limit"] = limit
    params["offset"] = offset
    return QueryFragment(
        where=where,
        pagination="LIMIT :limit OFFSET :offset",
        limit=limit,
        offset=offset,
        params=params,
    )
