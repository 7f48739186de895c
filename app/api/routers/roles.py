from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import app.repositories.role as role_repo
from app.api.deps import get_db
from app.schemas.role import Role

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=list[Role])
def list_roles(db: Session = Depends(get_db)):
    """Global roles: admin, manager and worker. Public, used by the sign-up form."""
    return [Role.model_validate(role) for role in role_repo.get_all_roles(db)]
