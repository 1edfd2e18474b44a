from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from stockledger.database import get_db
from stockledger.services.auth_service import AuthService
from stockledger.services.errors import AuthenticationError
from stockledger.schemas.user import LoginRequest, LoginResponse, UserResponse

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    description="Check a username (or email) and password. Returns the user without its password hash."
)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """Authenticate a user or one of the demo accounts."""
    service = AuthService(db)
    try:
        user, is_demo = service.authenticate(credentials.username, credentials.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    return LoginResponse(user=UserResponse.model_validate(user), is_demo=is_demo)
