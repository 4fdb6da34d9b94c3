# student_housing/main.py

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from student_housing.config import ALLOWED_ORIGINS
from student_housing.domain.errors import HousingError
from student_housing.logging_config import setup_logging
from student_housing.middleware import RequestIDMiddleware
from student_housing.routes.availability import router as availability_router
from student_housing.routes.bookings import router as bookings_router
from student_housing.routes.health import router as health_router
from student_housing.routes.listings import router as listings_router
from student_housing.routes.maintenance import router as maintenance_router
from student_housing.routes.metrics import router as metrics_router
from student_housing.routes.reviews import router as reviews_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Student Housing API",
    description="Listings, bookings, availability, geo search and maintenance for student housing",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(HousingError)
async def housing_error_handler(request: Request, exc: HousingError) -> JSONResponse:
    logger.info(
        "request_refused",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.kind,
        detail=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(availability_router, tags=["Availability"])
app.include_router(listings_router, tags=["Listings"])
app.include_router(bookings_router, tags=["Bookings"])
app.include_router(reviews_router, tags=["Reviews"])
app.include_router(maintenance_router, tags=["Maintenance"])
