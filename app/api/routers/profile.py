# app/api/routers/profile.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id, rate_limit
from app.api.responses import success
from app.data.database import get_db
from app.domain.schemas import ApiResponse, ProfileOut, ProfileUpdateIn
from app.services.user_profile_service import UserProfileService

router = APIRouter(prefix="/profile", tags=["profile"])


def get_service(db: Session = Depends(get_db)):
    return UserProfileService(db)


@router.get("", response_model=ApiResponse[ProfileOut])
def get_profile(
    user_id: str = Depends(get_current_user_id),
    svc: UserProfileService = Depends(get_service),
):
    return success(svc.get_or_create_profile(user_id))


@router.put("", response_model=ApiResponse[ProfileOut], dependencies=[Depends(rate_limit("profile"))])
def update_profile(
    payload: ProfileUpdateIn,
    user_id: str = Depends(get_current_user_id),
    svc: UserProfileService = Depends(get_service),
):
    """
    Tylko przeslane pola sa nadpisywane, null czysci pole.
    """
    return success(svc.update_profile(user_id, payload.model_dump(exclude_unset=True)))
