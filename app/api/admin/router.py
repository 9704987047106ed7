from fastapi import APIRouter
from app.api.admin.crud_modules.router import router as crud_router

router = APIRouter()
router.include_router(crud_router, prefix="/crud", tags=["AdminCrud"])
