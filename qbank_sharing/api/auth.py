from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import List
from qbank_sharing.core.auth import create_token
from qbank_sharing.core.config import get_settings

router = APIRouter()


class MockLogin(BaseModel):
    user_id: int
    roles: List[str] = []


@router.post("/mock-login")
def mock_login(payload: MockLogin):
    if get_settings().is_production():
        raise HTTPException(status_code=404, detail="Not found")
    token = create_token(str(payload.user_id), payload.roles)
    return {"access_token": token, "token_type": "bearer", "roles": payload.roles}
