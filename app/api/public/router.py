from fastapi import APIRouter
from app.api.public import auth, kits, filters, stats, suggestions

router = APIRouter()
router.include_router(kits.router, prefix="/kits", tags=["Kits"])
router.include_router(filters.router, prefix="/filters", tags=["Kits"])
router.include_router(stats.router, prefix="/stats", tags=["Kits"])
router.include_router(suggestions.router, prefix="/suggestions", tags=["Suggestions"])
router.include_router(auth.router, prefix="/auth", tags=["Auth"])
