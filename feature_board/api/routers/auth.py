# feature_board/api/routers/auth.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from feature_board.api.dependencies import get_user_store
from feature_board.config import constants
from feature_board.services.user_store import UserStore

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", status_code=201)
def signup(payload: Dict[str, Any] = Body(...), users: UserStore = Depends(get_user_store)):
    user = users.create_user(
        payload.get("username") or "",
        payload.get("email") or "",
        payload.get("password") or "",
    )
    return {
        "success": True,
        "message": constants.SIGNUP_SUCCESS,
        "user": user.model_dump(mode="json", by_alias=True),
    }


@router.post("/login")
def login(payload: Dict[str, Any] = Body(...), users: UserStore = Depends(get_user_store)):
    user = users.authenticate(payload.get("email") or "", payload.get("password") or "")
    return {
        "success": True,
        "message": constants.LOGIN_SUCCESS,
        "user": user.model_dump(mode="json", by_alias=True),
    }
