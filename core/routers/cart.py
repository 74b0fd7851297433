"""
Cart Router

Server side of cart sync for logged-in users:
- GET /cart returns the caller's stored cart record (empty items if none)
- POST /cart replaces the caller's cart record with the given items
"""
from fastapi import APIRouter, Depends, HTTPException

from core.auth import CartUser, verify_bearer_auth
from core.cart import CartStoreUnavailable, get_cart_record_store
from core.errors import ERROR_CART_UNAVAILABLE, ERROR_INTERNAL
from core.logging import get_logger
from .models import CartRecordOut, ReplaceCartRequest

logger = get_logger(__name__)

router = APIRouter(tags=["cart"])


@router.get("/cart", response_model=CartRecordOut)
async def get_cart(user: CartUser = Depends(verify_bearer_auth)):
    """Get the caller's cart record."""
    store = get_cart_record_store()
    try:
        record = await store.get_record(user.id)
    except CartStoreUnavailable as e:
        logger.error(f"Failed to get cart: {e}")
        raise HTTPException(status_code=503, detail=ERROR_CART_UNAVAILABLE)
    except Exception as e:
        logger.error(f"Failed to get cart: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=ERROR_INTERNAL)

    if record is None:
        return {"userId": user.id, "items": [], "updatedAt": None}
    return record.to_dict()


@router.post("/cart", response_model=CartRecordOut)
async def replace_cart(request: ReplaceCartRequest, user: CartUser = Depends(verify_bearer_auth)):
    """Replace the caller's cart (creates it when absent)."""
    store = get_cart_record_store()
    items = [item.model_dump(by_alias=True) for item in request.items]
    try:
        record = await store.replace_items(user.id, items)
    except CartStoreUnavailable as e:
        logger.error(f"Failed to replace cart: {e}")
        raise HTTPException(status_code=503, detail=ERROR_CART_UNAVAILABLE)
    except Exception as e:
        logger.error(f"Failed to replace cart: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=ERROR_INTERNAL)

    return record.to_dict()
