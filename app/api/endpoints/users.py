from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.crud import crud_user, crud_commission
from app import schemas
from app.core import dependencies
from app.core.hierarchy import resolve_participants
from app.core.commission_stats import get_commission_stats
from app.core.exceptions import HierarchyMalformed
from app.db.session import get_db
from app.models.user import User as UserModel

router = APIRouter()

@router.post("/", response_model=schemas.User, status_code=201)
def create_hierarchy_user(
    user_in: schemas.UserCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(dependencies.get_current_active_admin)
):
    """
    Admin: add a user to the hierarchy, optionally under a parent.
    """
    if crud_user.get_user_by_username(db, username=user_in.username):
        raise HTTPException(status_code=400, detail="A user with this username already exists in the system.")
    if user_in.email and crud_user.get_user_by_email(db, email=user_in.email):
        raise HTTPException(status_code=400, detail="A user with this email already exists in the system.")

    if user_in.parent_id:
        parent = crud_user.get_user(db, user_id=user_in.parent_id)
        if not parent:
            raise HTTPException(status_code=404, detail=f"Parent user with id {user_in.parent_id} not found.")

    return crud_user.create_user(db=db, obj_in=user_in)

@router.get("/me", response_model=schemas.User)
async def read_user_me(
    current_user: UserModel = Depends(dependencies.get_current_active_user)
):
    """
    Get current logged-in user's profile.
    """
    return current_user

@router.get("/me/commissions", response_model=List[schemas.CommissionSchema])
async def read_my_commissions(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(dependencies.get_current_active_user),
    status: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200)
):
    """
    Retrieve commissions earned by the currently authenticated user.
    Optionally filter by commission status (pending, paid).
    """
    return crud_commission.get_commissions_by_user(
        db, user_id=current_user.id, status=status, skip=skip, limit=limit
    )

@router.get("/me/commission-stats", response_model=schemas.CommissionStats)
async def read_my_commission_stats(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(dependencies.get_current_active_user)
):
    return get_commission_stats(db, current_user.id)

@router.get("/{user_id}/commission-stats", response_model=schemas.CommissionStats)
async def read_user_commission_stats(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(dependencies.get_current_active_admin)
):
    """
    Admin: commission totals and breakdown for any user.
    """
    if not crud_user.get_user(db, user_id=user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return get_commission_stats(db, user_id)

@router.get("/{user_id}/hierarchy", response_model=List[schemas.HierarchyParticipant])
async def read_user_hierarchy(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(dependencies.get_current_active_admin)
):
    """
    Admin: preview who would share a commission for a transaction processed by this user.
    """
    if not crud_user.get_user(db, user_id=user_id):
        raise HTTPException(status_code=404, detail="User not found")
    try:
        return resolve_participants(db, user_id)
    except HierarchyMalformed as exc:
        raise HTTPException(status_code=409, detail=exc.message)

@router.put("/{user_id}", response_model=schemas.User)
def update_hierarchy_user(
    user_id: int,
    user_in: schemas.UserUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(dependencies.get_current_active_admin)
):
    """
    Admin: move a user under another parent, deactivate or reactivate them, or change their email.
    Deactivated users keep their place in the hierarchy but forfeit their tier share.
    """
    db_user = crud_user.get_user(db, user_id=user_id)
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")

    if user_in.email and user_in.email != db_user.email and crud_user.get_user_by_email(db, email=user_in.email):
        raise HTTPException(status_code=400, detail="A user with this email already exists in the system.")

    if user_in.parent_id is not None:
        parent = crud_user.get_user(db, user_id=user_in.parent_id)
        if not parent:
            raise HTTPException(status_code=404, detail=f"Parent user with id {user_in.parent_id} not found.")
        # The new parent must not sit below the user being moved
        ancestor, seen = parent, set()
        while ancestor is not None and ancestor.id not in seen:
            if ancestor.id == db_user.id:
                raise HTTPException(status_code=400, detail="A user cannot be placed under itself or one of its descendants.")
            seen.add(ancestor.id)
            ancestor = ancestor.parent

    return crud_user.update_user(db=db, db_obj=db_user, obj_in=user_in)

@router.get("/{user_id}/children", response_model=schemas.UserWithChildren)
def read_user_children(
    user_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(dependencies.get_current_active_admin)
):
    """
    Admin: a user with the members directly below them.
    """
    db_user = crud_user.get_user(db, user_id=user_id)
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")
    children = crud_user.get_children(db, parent_id=user_id, skip=skip, limit=limit)
    return schemas.UserWithChildren(
        **schemas.User.model_validate(db_user).model_dump(),
        children=[schemas.User.model_validate(child) for child in children],
    )
