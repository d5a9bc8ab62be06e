from fastapi import APIRouter

from . import chat, medicines, pharmacies, search, users

router = APIRouter(prefix="/v1")
router.include_router(search.router)
router.include_router(medicines.router)
router.include_router(pharmacies.router)
router.include_router(chat.router)
router.include_router(users.router)
