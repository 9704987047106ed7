from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.deps import get_current_admin
from app.db.session import get_db

from .service import (
    create_row_service,
    delete_row_service,
    get_row_service,
    list_resources_meta_service,
    query_rows_service,
    update_row_service,
)

router = APIRouter()


def _multi_params(request: Request) -> dict[str, list[str]]:
    params: dict[str, list[str]] = {}
    for key, value in request.query_params.multi_items():
        params.setdefault(key, []).append(value)
    return params


@router.get("/meta/resources")
def list_resources_meta(admin: dict = Depends(get_current_admin)):
    return list_resources_meta_service(admin)


@router.get("/{resource}")
def query_rows(
    resource: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    return query_rows_service(resource, _multi_params(request), db, admin)


@router.get("/{resource}/{row_id}")
def get_row(
    resource: str,
    row_id: str,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    return get_row_service(resource, row_id, db, admin)


@router.post("/{resource}", status_code=201)
def create_row(
    resource: str,
    payload: dict[str, Any],
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    return create_row_service(resource, payload, db, admin)


@router.patch("/{resource}/{row_id}")
def update_row(
    resource: str,
    row_id: str,
    payload: dict[str, Any],
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    return update_row_service(resource, row_id, payload, db, admin)


@router.delete("/{resource}/{row_id}")
def delete_row(
    resource: str,
    row_id: str,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    return delete_row_service(resource, row_id, db, admin)
