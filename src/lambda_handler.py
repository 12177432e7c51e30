"""AWS Lambda handler for API Gateway requests.

API Gateway events are passed to the FastAPI application through the Mangum
ASGI adapter.
"""

import logging
import os
from typing import Any

from mangum import Mangum

from lambda_dependencies import get_fastapi_app, initialize_lambda_environment

logger = logging.getLogger(__name__)

# Build once per container on cold start (skipped in test mode)
if os.getenv("ENVIRONMENT") != "test":
    initialize_lambda_environment()
    mangum_handler: Mangum | None = Mangum(get_fastapi_app(), lifespan="off")
else:
    mangum_handler = None


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle an API Gateway event.

    Args:
        event: The API Gateway event payload
        context: The Lambda context object

    Returns:
        API Gateway response dict with statusCode, headers and body
    """
    global mangum_handler

    logger.info(f"Received Lambda invocation, request_id: {context.aws_request_id}")

    if mangum_handler is None:
        mangum_handler = Mangum(get_fastapi_app(), lifespan="off")

    result: dict[str, Any] = mangum_handler(event, context)
    return result
