from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from stockledger.database import get_db
from stockledger.services.user_service import UserService
from stockledger.services.errors import DuplicateUserError, UserNotFoundError
from stockledger.schemas.user import UserCreate, UserUpdate, UserResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/", response_model=list[UserResponse], summary="List users")
def list_users(db: Session = Depends(get_db)):
    """Active users, newest first."""
    return UserService(db).get_all()


@router.post(
    "/",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user"
)
def create_user(user_data: UserCreate, db: Session = Depends(get_db)):
    try:
        return UserService(db).create(user_data)
    except DuplicateUserError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/{user_id}", response_model=UserResponse, summary="Get user by ID")
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = UserService(db).get_by_id(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with ID {user_id} not found"
        )
    return user


@router.put("/{user_id}", response_model=UserResponse, summary="Update a user")
def update_user(user_id: int, user_data: UserUpdate, db: Session = Depends(get_db)):
    """Partial update; a supplied password is re-hashed."""
    try:
        return UserService(db).update(user_id, user_data)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateUserError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a user")
def delete_user(user_id: int, db: Session = Depends(get_db)):
    """Soft delete: the user can no longer log in but stays resolvable on history."""
    try:
        UserService(db).delete(user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return None
