# warehouse/domains/inv/tasks.py

import logging
from typing import Any, Dict

from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core.database import get_async_session_context
from warehouse.services.notifications import LowStockNotifier

#  로거 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def run_low_stock_notifier(db: AsyncSession) -> Dict[str, int]:
    """설정값으로 알림 서비스를 만들어 한 번 실행합니다 (워커/엔드포인트 공용)."""
    notifier = LowStockNotifier.from_settings()
    return await notifier.run(db)


async def notify_low_stock_task(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """
    ARQ 워커의 주기 작업.
    재주문 기준 이하로 떨어졌지만 아직 알림이 가지 않은 품목을 관리자에게 메일로 알립니다.
    """
    logger.info("ARQ 태스크: 재고 부족 알림 확인 실행")
    async with get_async_session_context() as db:
        result = await run_low_stock_notifier(db)
    logger.info("재고 부족 알림 완료: 발송 %s건, 실패 %s건", result["sent"], result["failed"])
    return {"status": "success", **result}
