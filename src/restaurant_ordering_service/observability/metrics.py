"""Custom metrics for the restaurant ordering service."""

from opentelemetry import metrics

# Get meter for ordering service
meter = metrics.get_meter("ordering-svc")

# Delivery eligibility outcomes
eligibility_check_counter = meter.create_counter(
    name="delivery_eligibility_checks_total",
    description="Total number of delivery eligibility checks by outcome",
    unit="1",
)

order_created_counter = meter.create_counter(
    name="orders_created_total",
    description="Total number of orders placed by fulfillment type",
    unit="1",
)

order_rejected_counter = meter.create_counter(
    name="orders_rejected_total",
    description="Total number of rejected order requests by error type",
    unit="1",
)

# Order value histogram
order_total_histogram = meter.create_histogram(
    name="order_total_cents",
    description="Order totals in minor currency units by fulfillment type",
    unit="cents",
)

# Geocoding provider response time histogram
geocoding_response_time = meter.create_histogram(
    name="geocoding_response_time_seconds",
    description="Response time for geocoding provider calls",
    unit="s",
)


def record_eligibility_check(deliverable: bool, matched: bool) -> None:
    """Record the outcome of a delivery eligibility check.

    Args:
        deliverable: Whether the candidate was accepted
        matched: Whether a configured zone matched (False for the open default)
    """
    eligibility_check_counter.add(1, {"deliverable": deliverable, "matched": matched})


def record_order_created(fulfillment_type: str, total_cents: int) -> None:
    """Record a successfully placed order.

    Args:
        fulfillment_type: DELIVERY or PICKUP
        total_cents: Order total in cents
    """
    order_created_counter.add(1, {"fulfillment_type": fulfillment_type})
    order_total_histogram.record(total_cents, {"fulfillment_type": fulfillment_type})


def record_order_rejected(error_type: str) -> None:
    """Record a rejected order request.

    Args:
        error_type: Class name of the error that rejected the order
    """
    order_rejected_counter.add(1, {"error_type": error_type})


def record_geocoding_call(operation: str, duration_seconds: float) -> None:
    """Record a geocoding provider call.

    Args:
        operation: The operation performed ("reverse" or "search")
        duration_seconds: Duration in seconds
    """
    geocoding_response_time.record(duration_seconds, {"operation": operation})
