"""Router for the local user session."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from balance.dependencies import Services, get_services
from balance.models.schemas import User


router = APIRouter(prefix="/api/session", tags=["session"])


@router.get("/user", response_model=User)
async def get_user(services: Services = Depends(get_services)):
    user = services.user_session.current_user()
    if user is None:
        raise HTTPException(status_code=404, detail="No active user")
    return user


@router.post("/user", response_model=User)
async def create_user(services: Services = Depends(get_services)):
    """Return the stored user, creating one if it was cleared."""
    return services.user_session.load_or_create_user()


@router.post("/reset")
async def reset_session(services: Services = Depends(get_services)) -> dict[str, str]:
    return {"session_id": services.user_session.reset_session()}


@router.delete("/user", status_code=204)
async def clear_user(services: Services = Depends(get_services)):
    services.user_session.clear_user()
