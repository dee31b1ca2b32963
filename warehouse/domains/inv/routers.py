# warehouse/domains/inv/routers.py

"""
'inv' 도메인 (재고 관리)의 API 엔드포인트를 정의하는 모듈입니다.

- 분류/품목 관리 (관리자)
- 입출고 기록 및 조회
- 파손 품목 관리
- 재고 부족 품목 조회 및 알림 발송 관리
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from warehouse.core import dependencies as deps
from warehouse.core.schemas import Message
from warehouse.domains.inv import crud as inv_crud
from warehouse.domains.inv import schemas as inv_schemas
from warehouse.domains.inv import tasks as inv_tasks
from warehouse.domains.inv.models import DamagedItemStatus, TransactionType
from warehouse.domains.usr.models import User as UsrUser

router = APIRouter(
    tags=["Inventory Management (재고 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. categories 엔드포인트
# =============================================================================
@router.post("/categories", response_model=inv_schemas.CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_create: inv_schemas.CategoryCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """새로운 품목 분류를 생성합니다. 관리자 권한이 필요합니다."""
    return await inv_crud.category.create(db, obj_in=category_create)


@router.get("/categories", response_model=List[inv_schemas.CategoryRead])
async def read_categories(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.category.get_multi(db, skip=skip, limit=limit)


@router.get("/categories/{category_id}", response_model=inv_schemas.CategoryRead)
async def read_category(
    category_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_category = await inv_crud.category.get(db, id=category_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found.")
    return db_category


@router.put("/categories/{category_id}", response_model=inv_schemas.CategoryRead)
async def update_category(
    category_id: int,
    category_update: inv_schemas.CategoryUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_category = await inv_crud.category.get(db, id=category_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found.")
    return await inv_crud.category.update(db, db_obj=db_category, obj_in=category_update)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """분류를 삭제합니다. 이 분류를 쓰던 품목은 분류 없음(NULL)이 됩니다."""
    if await inv_crud.category.delete(db, id=category_id) is None:
        raise HTTPException(status_code=404, detail="Category not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 2. inventory_items 엔드포인트
# =============================================================================
@router.post("/items", response_model=inv_schemas.InventoryItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(
    item_create: inv_schemas.InventoryItemCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_item = await inv_crud.inventory_item.create(db, obj_in=item_create)
    return await inv_crud.inventory_item.get_joined(db, db_item.id)


@router.get("/items", response_model=List[inv_schemas.InventoryItemRead])
async def read_items(
    search: Optional[str] = None,
    category_id: Optional[int] = Query(None, alias="categoryId"),
    location_id: Optional[int] = Query(None, alias="locationId"),
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """품목 목록을 분류/장소/공급업체 이름과 함께 조회합니다."""
    return await inv_crud.inventory_item.get_multi_joined(
        db, search=search, category_id=category_id, location_id=location_id, skip=skip, limit=limit
    )


@router.get("/items/{item_id}", response_model=inv_schemas.InventoryItemRead)
async def read_item(
    item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_item = await inv_crud.inventory_item.get_joined(db, item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    return db_item


@router.put("/items/{item_id}", response_model=inv_schemas.InventoryItemRead)
async def update_item(
    item_id: int,
    item_update: inv_schemas.InventoryItemUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    db_item = await inv_crud.inventory_item.get(db, id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    await inv_crud.inventory_item.update(db, db_obj=db_item, obj_in=item_update)
    return await inv_crud.inventory_item.get_joined(db, item_id)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    if await inv_crud.inventory_item.delete(db, id=item_id) is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 3. stock_transactions 엔드포인트 (입출고)
# =============================================================================
@router.post(
    "/transactions",
    response_model=inv_schemas.StockTransactionRecorded,
    status_code=status.HTTP_201_CREATED,
    summary="입출고 기록",
)
async def record_transaction(
    transaction_create: inv_schemas.StockTransactionCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """
    입고(IN) 또는 출고(OUT) 한 건을 기록합니다.

    전후 수량은 서버가 잠근 품목 행에서 계산합니다. 요청의 stockBefore가 현재 수량과 다르면
    409로 거부되므로, 클라이언트는 품목을 다시 조회한 뒤 재시도해야 합니다.
    """
    db_transaction = await inv_crud.stock_transaction.record(
        db, obj_in=transaction_create, user_id=current_user.id
    )
    return {
        "message": "Transaction recorded successfully",
        "id": db_transaction.id,
        "stock_before": db_transaction.stock_before,
        "stock_after": db_transaction.stock_after,
    }


@router.get("/transactions", response_model=List[inv_schemas.StockTransactionRead])
async def read_transactions(
    item_id: Optional[int] = Query(None, alias="itemId"),
    transaction_type: Optional[TransactionType] = Query(None, alias="type"),
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.stock_transaction.get_multi_joined(
        db, item_id=item_id, transaction_type=transaction_type, skip=skip, limit=limit
    )


# =============================================================================
# 4. damaged_items 엔드포인트
# =============================================================================
@router.get("/damaged-items", response_model=List[inv_schemas.DamagedItemRead])
async def read_damaged_items(
    status_filter: Optional[DamagedItemStatus] = Query(None, alias="status"),
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.damaged_item.get_multi_joined(db, status=status_filter, skip=skip, limit=limit)


@router.put("/damaged-items/{damaged_item_id}", response_model=inv_schemas.DamagedItemRead)
async def update_damaged_item(
    damaged_item_id: int,
    damaged_update: inv_schemas.DamagedItemUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """파손 품목의 처리 상태(Standby/Thrown)와 메모를 변경합니다."""
    db_damaged = await inv_crud.damaged_item.get(db, id=damaged_item_id)
    if db_damaged is None:
        raise HTTPException(status_code=404, detail="Damaged item not found.")
    return await inv_crud.damaged_item.update(db, db_obj=db_damaged, obj_in=damaged_update)


@router.delete("/damaged-items/{damaged_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_damaged_item(
    damaged_item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    if await inv_crud.damaged_item.delete(db, id=damaged_item_id) is None:
        raise HTTPException(status_code=404, detail="Damaged item not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 5. 재고 부족 엔드포인트
# =============================================================================
@router.get("/low-stock-items", response_model=List[inv_schemas.InventoryItemRead])
async def read_low_stock_items(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """재주문 기준 이하인 모든 품목 (알림 발송 여부와 무관)."""
    return await inv_crud.inventory_item.list_at_or_below_reorder_level(db)


@router.get("/low-stock-alerts/pending", response_model=List[inv_schemas.InventoryItemRead])
async def read_pending_low_stock_alerts(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """재주문 기준 이하이면서 아직 알림을 보내지 않은 품목."""
    return await inv_crud.low_stock_alert.list_pending(db)


@router.post("/low-stock-alerts/notify", response_model=inv_schemas.LowStockNotifyResult)
async def notify_low_stock(
    request: Request,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """
    미발송 재고 부족 알림을 즉시 발송합니다.
    Redis가 연결되어 있으면 워커 작업으로 등록하고, 아니면 요청 안에서 바로 실행합니다.
    """
    arq_redis_pool = getattr(request.app.state, "redis", None)
    if arq_redis_pool:
        await arq_redis_pool.enqueue_job("notify_low_stock_task")
        return {"message": "Low stock notification queued"}
    result = await inv_tasks.run_low_stock_notifier(db)
    return {"message": "Low stock notification completed", **result}


@router.post("/low-stock-alerts/{item_id}", response_model=Message)
async def mark_low_stock_alert_sent(
    item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    await inv_crud.low_stock_alert.mark_sent(db, item_id)
    return {"message": "Low stock alert marked as sent"}


@router.delete("/low-stock-alerts/{item_id}", response_model=Message)
async def clear_low_stock_alert(
    item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    await inv_crud.low_stock_alert.clear(db, item_id)
    return {"message": "Low stock alert cleared"}
