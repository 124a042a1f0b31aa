from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    strategy: str


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    return HealthResponse(
        status="healthy",
        strategy=request.app.state.settings.strategy.value,
    )


@router.get("/")
async def root(request: Request):
    return {
        "service": request.app.state.settings.app_name,
        "message": "Rate limiting service is running",
    }


@router.get("/test")
async def test_endpoint(request: Request):
    return {
        "message": "Request allowed",
        "client": request.headers.get("X-API-Key") or (request.client.host if request.client else "unknown"),
    }
