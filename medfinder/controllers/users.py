import asyncio

from fastapi import APIRouter, Depends

from medfinder.dependencies import ErrorResponse, require_account
from medfinder.schemas import CamelModel
from medfinder.services import accounts
from medfinder.services.identity import Identity

router = APIRouter(prefix="/auth", tags=["auth"])


class UserOut(CamelModel):
    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None


@router.get(
    "/user",
    response_model=UserOut,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def current_user(identity: Identity = Depends(require_account)):
    user = await asyncio.to_thread(accounts.get_user_sync, identity.id)
    return UserOut.model_validate(user)
