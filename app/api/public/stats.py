import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import RemoteFailure
from app.db.session import get_db
from app.services.kit_catalog import get_stats

router = APIRouter()
_LOG = logging.getLogger("app.catalog")


@router.get("")
def get_catalog_stats(db: Session = Depends(get_db)):
    try:
        return {"data": get_stats(db)}
    except SQLAlchemyError:
        _LOG.exception("catalog stats failed")
        raise RemoteFailure("Failed to fetch stats")
