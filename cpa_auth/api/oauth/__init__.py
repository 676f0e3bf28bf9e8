"""OAuth protocol endpoints."""

from fastapi import APIRouter

from cpa_auth.api.oauth import authorize, device, token

router = APIRouter()

router.include_router(token.router)
router.include_router(authorize.router)
router.include_router(device.router)

__all__ = ["router"]
