"""
Prometheus metrics for availability checks, booking transitions and search.

This module defines all Prometheus metrics used throughout the application for
observability and monitoring. Metrics are exposed via the /metrics endpoint for
scraping by Prometheus.

Example:
    >>> from student_housing.metrics import booking_transitions
    >>> booking_transitions.labels(
    ...     from_status="pending", to_status="approved", outcome="success"
    ... ).inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Availability Metrics
# =============================================================================

availability_checks = Counter(
    "housing_availability_checks_total",
    "Total number of availability checks",
    ["result"],
)
"""
Counter for availability checks.

Labels:
    result: available, overlap, or listing_inactive
"""

approval_conflicts = Counter(
    "housing_approval_conflicts_total",
    "Approvals refused because the dates were taken by another booking",
)
"""Counter for approvals that failed the availability re-check."""

# =============================================================================
# Lifecycle Metrics
# =============================================================================

booking_transitions = Counter(
    "housing_booking_transitions_total",
    "Booking status transitions attempted",
    ["from_status", "to_status", "outcome"],
)
"""
Counter for booking status transitions.

Labels:
    from_status: Status before the transition
    to_status: Requested status
    outcome: success, invalid, unauthorized, or conflict
"""

listing_transitions = Counter(
    "housing_listing_transitions_total",
    "Listing status transitions applied",
    ["from_status", "to_status"],
)

lifecycle_advanced = Counter(
    "housing_lifecycle_bookings_advanced_total",
    "Bookings moved by the scheduled lifecycle job",
    ["to_status"],
)

# =============================================================================
# Search Metrics
# =============================================================================

nearby_search_duration = Histogram(
    "housing_nearby_search_duration_seconds",
    "Duration of radius searches in seconds (query plus post-filter)",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, float("inf")),
)
"""
Histogram for radius search duration.

Buckets: 5ms, 10ms, 25ms, 50ms, 100ms, 250ms, 500ms, 1s, +Inf
"""

nearby_listings_dropped = Counter(
    "housing_nearby_listings_dropped_total",
    "Candidate listings dropped from radius searches for missing or invalid coordinates",
)

# =============================================================================
# Maintenance Metrics
# =============================================================================

maintenance_requests_opened = Counter(
    "housing_maintenance_requests_opened_total",
    "Maintenance requests raised by renters",
    ["issue_type", "priority"],
)

maintenance_transitions = Counter(
    "housing_maintenance_transitions_total",
    "Maintenance request status changes applied",
    ["from_status", "to_status"],
)
