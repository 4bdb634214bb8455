from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from dairy_auth.api.deps import get_current_user, get_db, require_role
from dairy_auth.api.v1.schemas import UserRead
from dairy_auth.db.models import Role, User

router = APIRouter()

@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)):
    return current_user

@router.get("/", response_model=list[UserRead])
def list_users(_: User = Depends(require_role(Role.ADMIN.value)), db: Session = Depends(get_db)):
    return db.query(User).order_by(User.created_at).all()
