from fastapi import APIRouter, Depends

from interview_prep.api.deps import get_app_settings
from interview_prep.api.schemas import LoginRequest, LoginResponse
from interview_prep.core.config import Settings
from interview_prep.core.security import DEFAULT_USER_ID, create_session_token, validate_login_api_key

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, settings: Settings = Depends(get_app_settings)) -> LoginResponse:
    validate_login_api_key(payload.api_key, settings=settings)
    token = create_session_token(DEFAULT_USER_ID, settings=settings)
    return LoginResponse(token=token, user_id=DEFAULT_USER_ID)
