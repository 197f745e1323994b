from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from gymii.db import get_db
from gymii.models import User
from gymii.schemas.profile import ProfileRead, ProfileUpdate
from gymii.repositories.profile_repo import ProfileRepository
from gymii.deps.auth import get_current_user

router = APIRouter(prefix="/profile", tags=["profile"])

@router.get("", response_model=ProfileRead)
def get_profile(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    profile = ProfileRepository(db).get(current.id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile

@router.put("", response_model=ProfileRead)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    return ProfileRepository(db).upsert(current.id, **payload.model_dump())
