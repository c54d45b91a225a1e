from fastapi import APIRouter, Depends

from acquisition.api.v1.endpoints.health import router as health_router
from acquisition.api.v1.endpoints.auth import router as auth_router
from acquisition.api.v1.endpoints.me import router as me_router
from acquisition.api.v1.endpoints.users import router as users_router
from acquisition.api.v1.endpoints.listings import router as listings_router
from acquisition.api.v1.endpoints.deals import router as deals_router
from acquisition.services.rate_limit import rate_limit_gate


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(auth_router, tags=["auth"])
router.include_router(me_router, tags=["me"])
router.include_router(users_router, tags=["users"], dependencies=[Depends(rate_limit_gate)])
router.include_router(listings_router, tags=["listings"])
router.include_router(deals_router, tags=["deals"], dependencies=[Depends(rate_limit_gate)])
