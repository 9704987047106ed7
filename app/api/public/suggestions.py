from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_current_principal
from app.db.session import get_db
from app.schemas.catalog import SuggestionCreate, SuggestionReview
from app.services.suggestions import create_suggestion, list_suggestions, review_suggestion

router = APIRouter()


@router.get("")
def get_suggestions(
    status: str | None = Query(None),
    db: Session = Depends(get_db),
    principal: dict = Depends(get_current_principal),
):
    return {"data": list_suggestions(db, principal, status)}


@router.post("", status_code=201)
def post_suggestion(
    payload: SuggestionCreate,
    db: Session = Depends(get_db),
    principal: dict = Depends(get_current_principal),
):
    return {"data": create_suggestion(db, principal, payload)}


@router.post("/{suggestion_id}/review")
def post_review(
    suggestion_id: str,
    payload: SuggestionReview,
    db: Session = Depends(get_db),
    principal: dict = Depends(get_current_principal),
):
    return {"data": review_suggestion(db, principal, suggestion_id, payload)}
