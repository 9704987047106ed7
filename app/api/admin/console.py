from fastapi import APIRouter, Depends, Query

from app.api.admin.crud_modules.resources import RESOURCES
from app.core.deps import get_current_admin

# Browser-facing admin entry points. Navigation under /admin is gated by
# app.core.admin_gate before these handlers run.
router = APIRouter()


@router.get("/admin/login", include_in_schema=False)
def admin_login(error: str | None = Query(None)):
    return {"login_url": "/api/auth/login", "error": error}


@router.get("/admin", include_in_schema=False)
def admin_home(admin: dict = Depends(get_current_admin)):
    return {
        "admin": admin.get("email"),
        "resources": [
            {"slug": resource.slug, "label": resource.label, "url": f"/api/admin/crud/{resource.slug}"}
            for resource in RESOURCES
        ],
    }
