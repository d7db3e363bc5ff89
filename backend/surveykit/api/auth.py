from fastapi import APIRouter, Depends

from surveykit.api.deps import get_caller_id, get_store
from surveykit.schemas.user import UserOut, UserUpdate
from surveykit.store.base import SurveyStore

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.get("/user", response_model=UserOut)
def current_user(caller_id: str = Depends(get_caller_id), store: SurveyStore = Depends(get_store)):
    return UserOut.model_validate(store.ensure_user(caller_id))

@router.put("/user", response_model=UserOut)
def update_current_user(
    payload: UserUpdate,
    caller_id: str = Depends(get_caller_id),
    store: SurveyStore = Depends(get_store),
):
    user = store.upsert_user(caller_id, **payload.model_dump(exclude_unset=True))
    return UserOut.model_validate(user)
