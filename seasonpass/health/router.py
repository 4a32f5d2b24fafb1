from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from seasonpass.health.service import health_database_info
from seasonpass.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    status_code, body = health_database_info()
    return JSONResponse(status_code=status_code, content=body)

@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return JSONResponse(rate_limit_health_info(request))
