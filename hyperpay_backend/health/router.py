from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from hyperpay_backend.payments.repository import CART_ITEMS_TABLE, ORDERS_TABLE, SupabaseOrderStore
from hyperpay_backend.utils.dependencies import get_order_store
from hyperpay_backend.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_root():
    return {"ok": True}


@router.get("/supabase")
def health_supabase(store: SupabaseOrderStore = Depends(get_order_store)):
    tables = {name: store.table_status(name) for name in (ORDERS_TABLE, CART_ITEMS_TABLE)}
    return JSONResponse({"connect_ok": all(t["ok"] for t in tables.values()), "tables": tables})


@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
