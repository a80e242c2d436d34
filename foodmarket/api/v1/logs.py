"""
操作日志路由模块
订单动态查询：买家查看自己订单的下单、接单、拒单、状态推进和取消记录，
商家查看自己处理过的订单记录，用于前端"订单动态"页面和售后纠纷核对。
日志由订单服务在状态变更的同一事务内写入，因此与订单状态一致。
"""

from fastapi import APIRouter, Depends, Query, Request

from ...core.database import DatabaseManager, get_db
from ...core.security import require_auth
from ...models.base import PaginatedResponse, PaginationParams
from ...schemas.common import LogEntry

router = APIRouter()


def _session_ids(request: Request, user_id: str) -> list:
    """当前会话关联的全部身份ID：用户、买家、商家"""
    ids = [user_id, request.session.get("buyer_id"), request.session.get("vendor_id")]
    return [i for i in ids if i]


@router.get("/my", response_model=PaginatedResponse)
def get_my_logs(
    request: Request,
    page: int = Query(1, ge=1, description="页码"),
    size: int = Query(10, ge=1, le=100, description="每页大小"),
    user_id: str = Depends(require_auth),
    db: DatabaseManager = Depends(get_db),
):
    """获取当前会话的订单动态（作为当事买家或操作商家），按时间倒序分页"""
    pagination = PaginationParams(page=page, size=size)
    ids = _session_ids(request, user_id)
    marks = ", ".join("?" for _ in ids)

    total = db.execute_one(
        f"SELECT COUNT(*) FROM logs WHERE user_id IN ({marks}) OR actor_id IN ({marks})",
        ids + ids
    )[0]
    rows = db.fetch_dicts(
        f"""
        SELECT log_id, user_id, actor_id, action, detail_json, created_at
        FROM logs
        WHERE user_id IN ({marks}) OR actor_id IN ({marks})
        ORDER BY created_at DESC, log_id DESC
        LIMIT ? OFFSET ?
        """,
        ids + ids + [pagination.size, pagination.offset]
    )

    entries = [
        LogEntry(**{**row, "detail_json": str(row["detail_json"]), "created_at": str(row["created_at"])})
        for row in rows
    ]
    return PaginatedResponse.create(entries, total, pagination)
