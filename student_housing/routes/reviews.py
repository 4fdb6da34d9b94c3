from typing import Any

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.engine import Engine

from student_housing.dependencies import get_actor, get_db_engine
from student_housing.domain.actors import Actor
from student_housing.routes._helpers import run_or_500
from student_housing.schemas.reviews import ReviewCreatePayload, ReviewOut
from student_housing.services.reviews import create_review, list_reviews, remove_review

router = APIRouter()


@router.post(
    "/bookings/{booking_id}/review",
    status_code=status.HTTP_201_CREATED,
    response_model=ReviewOut,
)
def post_review(
    booking_id: int,
    payload: ReviewCreatePayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    """
    Review a completed booking (its renter, once). The listing's rating and
    review count are recomputed in the same transaction.
    """
    return run_or_500(
        "review_creation_failed",
        lambda: create_review(engine, actor, booking_id, payload.rating, payload.comment),
    )


@router.get("/listings/{listing_id}/reviews", response_model=list[ReviewOut])
def get_reviews(listing_id: int, engine: Engine = Depends(get_db_engine)) -> list[dict[str, Any]]:
    return run_or_500("review_list_failed", lambda: list_reviews(engine, listing_id))


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: int,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> Response:
    run_or_500("review_deletion_failed", lambda: remove_review(engine, actor, review_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
