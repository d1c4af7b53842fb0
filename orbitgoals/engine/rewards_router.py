"""Rewards endpoints: wallet, shop, spin wheel, premium payments."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from orbitgoals.auth import current_user, verify_api_key
from orbitgoals.engine.errors import OrbitError, status_code_for
from orbitgoals.engine.models import AdminStats, Identity, PaymentRequest, SpinResult, Wallet
from orbitgoals.engine.payments import PaymentService
from orbitgoals.engine.shop import Shop, get_item, list_items
from orbitgoals.services import get_payments, get_shop

router = APIRouter(prefix="/orbit", tags=["rewards"], dependencies=[Depends(verify_api_key)])
admin_router = APIRouter(prefix="/orbit/admin", tags=["admin"], dependencies=[Depends(verify_api_key)])


def _http(exc: OrbitError) -> HTTPException:
    return HTTPException(status_code=status_code_for(exc), detail=str(exc) or exc.__class__.__name__)


@router.get("/shop/items")
async def shop_items(item_type: str | None = Query(default=None, alias="type")) -> list[dict]:
    return [
        {"id": i.id, "type": i.type, "title": i.title, "description": i.description, "cost": i.cost, "value": i.value}
        for i in list_items(item_type)
    ]


@router.get("/wallet", response_model=Wallet)
async def wallet(
    user: Identity = Depends(current_user),
    shop: Shop = Depends(get_shop),
) -> Wallet:
    return shop.wallet(user)


@router.post("/shop/purchase/{item_id}")
async def purchase(
    item_id: str,
    user: Identity = Depends(current_user),
    shop: Shop = Depends(get_shop),
    payments: PaymentService = Depends(get_payments),
) -> dict:
    item = get_item(item_id)
    try:
        if item is not None and item.type == "premium":
            request = await payments.submit(user)
            return {"payment": request.model_dump(mode="json", by_alias=True)}
        return {"wallet": shop.purchase(user, item_id).model_dump(mode="json", by_alias=True)}
    except OrbitError as exc:
        raise _http(exc)


@router.post("/shop/equip/{item_id}", response_model=Wallet)
async def equip(
    item_id: str,
    user: Identity = Depends(current_user),
    shop: Shop = Depends(get_shop),
) -> Wallet:
    try:
        return shop.equip_avatar(user, item_id)
    except OrbitError as exc:
        raise _http(exc)


@router.post("/spin", response_model=SpinResult)
async def spin(
    user: Identity = Depends(current_user),
    shop: Shop = Depends(get_shop),
) -> SpinResult:
    try:
        return shop.spin(user)
    except OrbitError as exc:
        raise _http(exc)


# ---------------------------------------------------------------------------
# Payments (user side)
# ---------------------------------------------------------------------------


@router.post("/payments", response_model=PaymentRequest)
async def payment_submit(
    user: Identity = Depends(current_user),
    payments: PaymentService = Depends(get_payments),
) -> PaymentRequest:
    return await payments.submit(user)


@router.get("/payments/pro-status")
async def pro_status(
    user: Identity = Depends(current_user),
    payments: PaymentService = Depends(get_payments),
) -> dict:
    return {"userId": user.id, "isPro": await payments.check_pro(user)}


# ---------------------------------------------------------------------------
# Payments (admin side)
# ---------------------------------------------------------------------------


@admin_router.get("/payments", response_model=list[PaymentRequest])
async def payment_list(payments: PaymentService = Depends(get_payments)) -> list[PaymentRequest]:
    return await payments.list_requests()


@admin_router.post("/payments/{request_id}/approve", response_model=PaymentRequest)
async def payment_approve(
    request_id: str,
    payments: PaymentService = Depends(get_payments),
) -> PaymentRequest:
    try:
        return await payments.approve(request_id)
    except OrbitError as exc:
        raise _http(exc)


@admin_router.post("/payments/{request_id}/reject", response_model=PaymentRequest)
async def payment_reject(
    request_id: str,
    payments: PaymentService = Depends(get_payments),
) -> PaymentRequest:
    try:
        return await payments.reject(request_id)
    except OrbitError as exc:
        raise _http(exc)


@admin_router.get("/stats", response_model=AdminStats)
async def admin_stats(payments: PaymentService = Depends(get_payments)) -> AdminStats:
    return await payments.admin_stats()
