from typing import Any, Callable, TypeVar

import structlog
from fastapi import HTTPException

from student_housing.domain.errors import HousingError
from student_housing.domain.geo import coerce_coordinates

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def run_or_500(event: str, operation: Callable[[], T]) -> T:
    """
    Run a service call from a route handler.

    HTTPException and domain errors propagate to FastAPI (the app-level
    HousingError handler renders the latter); anything else is logged under
    ``event`` and surfaces as 500.

    Args:
        event: Log event name for unexpected failures
        operation: Zero-argument callable doing the work

    Returns:
        Whatever the operation returns
    """
    try:
        return operation()
    except (HTTPException, HousingError):
        raise
    except Exception as e:
        logger.exception(event, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


def validate_coordinates_or_400(lat: Any, lng: Any) -> tuple[float, float]:
    """
    Validate a search center.

    Raises:
        HTTPException: 400 if the coordinates are not finite and in range
    """
    coords = coerce_coordinates(lat, lng)
    if coords is None:
        raise HTTPException(status_code=400, detail="lat/lng must be valid coordinates")
    return coords
