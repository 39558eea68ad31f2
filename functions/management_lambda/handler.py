"""
AWS Lambda entrypoint for token management requests.
"""

from __future__ import annotations

import base64
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

from patservice.api.dispatcher import RequestRouter
from patservice.clients import DynamoDBTokenStore, KMSKeyProvider
from patservice.core.config import AppSettings, get_settings
from patservice.core.logging import configure_logging
from patservice.services import CredentialService

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}


@lru_cache()
def _bootstrap() -> RequestRouter:
    """Build the clients once per Lambda container."""
    settings = get_settings()
    configure_logging(settings.log_level)

    aws = settings.aws_settings()
    service = CredentialService(
        key_provider=KMSKeyProvider(aws),
        token_store=DynamoDBTokenStore(aws),
    )
    return RequestRouter(service)


def _deadline_check(context: Any, settings: AppSettings) -> Optional[Callable[[], bool]]:
    """Stop paginated reads once the invocation is about to time out."""
    remaining = getattr(context, "get_remaining_time_in_millis", None)
    if remaining is None:
        return None
    margin = settings.lambda_cancel_margin_ms
    return lambda: remaining() < margin


def _event_body(event: Dict[str, Any]) -> Optional[str]:
    body = event.get("body")
    if body is not None and event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return body


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    AWS Lambda handler invoked by API Gateway (HTTP API, payload v2).

    The request path selects the operation; status codes and bodies come from
    the request router so error detail stays in the logs.
    """
    router = _bootstrap()
    raw_path = event.get("rawPath") or ""
    request_id = getattr(context, "aws_request_id", None)
    logger.info("Handling %s", raw_path, extra={"request_id": request_id})

    try:
        body = _event_body(event)
    except (ValueError, UnicodeDecodeError):
        logger.warning("Undecodable request body", extra={"request_id": request_id})
        body = ""

    result = router.dispatch(
        raw_path,
        body,
        should_stop=_deadline_check(context, get_settings()),
    )
    return {
        "statusCode": int(result.status_code),
        "headers": dict(_JSON_HEADERS),
        "body": result.body(),
    }


__all__ = ["lambda_handler"]
