from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from gymii.db import get_db
from gymii.models import User
from gymii.schemas.template import TemplateRead
from gymii.schemas.workout import WorkoutDetailRead
from gymii.repositories.template_repo import TemplateRepository
from gymii.deps.auth import get_current_user
from gymii.training.plans import parse_template

router = APIRouter(prefix="/templates", tags=["templates"])

@router.get("", response_model=list[TemplateRead])
def list_templates(db: Session = Depends(get_db), _user: User = Depends(get_current_user)):
    return [parse_template(row) for row in TemplateRepository(db).list()]

@router.post("/{slug}/import", response_model=WorkoutDetailRead, status_code=status.HTTP_201_CREATED)
def import_template(slug: str, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    repo = TemplateRepository(db)
    row = repo.get_by_slug(slug)
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return repo.import_for_user(parse_template(row), current.id)
