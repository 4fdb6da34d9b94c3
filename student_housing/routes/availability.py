import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from student_housing.dependencies import get_db_engine
from student_housing.domain.dates import DateRange
from student_housing.domain.errors import HousingError
from student_housing.schemas.availability import AvailabilityOut
from student_housing.services.availability import is_available

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/availability", response_model=AvailabilityOut)
def check_availability(
    listing_id: int = Query(..., alias="listingId", description="Listing to check"),
    start_date: str = Query(..., alias="startDate", description="ISO date, inclusive"),
    end_date: str = Query(..., alias="endDate", description="ISO date, exclusive"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, bool]:
    """
    Check whether a listing can host a stay over [startDate, endDate).

    Returns:
        dict: {"available": bool}
    """
    try:
        dates = DateRange.parse(start_date, end_date)
        with engine.connect() as conn:
            available = is_available(conn, listing_id, dates)
        return {"available": available}

    except (HTTPException, HousingError):
        raise
    except Exception as e:
        logger.exception("availability_check_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
