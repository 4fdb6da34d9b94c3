from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func

from student_housing.domain.statuses import ListingStatus, enum_values
from student_housing.models.base import Base


class Listing(Base):
    """
    ORM model for rentable student housing listings.

    Coordinates are optional; listings without them never match a radius
    search. rating/review_count and current_occupancy are derived values,
    recomputed explicitly by the write paths that change reviews and
    bookings (see services.reviews and services.occupancy).
    """

    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("maximum_occupancy >= 1", name="ck_listings_maximum_occupancy"),
        CheckConstraint(
            "current_occupancy >= 0 AND current_occupancy <= maximum_occupancy",
            name="ck_listings_current_occupancy",
        ),
        CheckConstraint("price >= 0", name="ck_listings_price"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, nullable=False, index=True)  # Owned by the auth service
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, server_default="")
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, index=True)
    maximum_occupancy = Column(Integer, nullable=False, server_default="1")
    current_occupancy = Column(Integer, nullable=False, server_default="0")
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    status = Column(
        Enum(ListingStatus, name="listing_status", values_callable=enum_values),
        nullable=False,
        server_default=ListingStatus.PENDING.value,
        index=True,
    )
    rating = Column(Float, nullable=False, server_default="0")
    review_count = Column(Integer, nullable=False, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
