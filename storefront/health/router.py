from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from storefront.health.service import health_commerce_info
from storefront.utils.rate_limit import rate_limit_health_info
from storefront.web.dependencies import get_http_client

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_root():
    return {"ok": True}


@router.get("/commerce")
async def health_commerce(http=Depends(get_http_client)):
    return JSONResponse(await health_commerce_info(http))


@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
