"""
Route-name dispatch for token management requests.

Both the Lambda entrypoint and the FastAPI app hand raw request bodies to
``RequestRouter.dispatch``; it is the only place that turns domain errors into
caller-visible statuses.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Dict, Optional, Type, Union

import pydantic
from pydantic import BaseModel

from patservice.core.errors import (
    KeyProviderError,
    OperationCancelled,
    StoreError,
    ValidationError,
)
from patservice.schemas import (
    DeleteTokenRequest,
    DeleteTokenResponse,
    ErrorResponse,
    GenerateTokenRequest,
    GenerateTokenResponse,
    ListTokensRequest,
    ListTokensResponse,
    TokenItem,
)
from patservice.services import CredentialService

logger = logging.getLogger(__name__)

RequestBody = Union[str, bytes, Dict[str, Any], None]

GENERATE_TOKEN = "GenerateToken"
LIST_TOKENS = "ListTokensByRepoID"
DELETE_TOKEN = "DeleteToken"

_INVALID_INPUT = ErrorResponse(message="Invalid input.")
_NOT_FOUND = ErrorResponse(message="Not found.")
_INTERNAL_ERROR = ErrorResponse(message="Internal error.")
_CANCELLED = ErrorResponse(message="Request cancelled.")


class _InvalidPayload(Exception):
    pass


@dataclass(frozen=True)
class RouterResponse:
    """Status code and JSON-ready payload for one dispatched request."""

    status_code: int
    payload: Dict[str, Any]

    def body(self) -> str:
        return json.dumps(self.payload)


def normalize_route(route: str) -> str:
    """Strip slashes and an optional ``api/`` prefix from a route name."""
    name = route.strip().strip("/")
    if name.startswith("api/"):
        name = name[len("api/"):]
    return name


def _parse(body: RequestBody, schema: Type[BaseModel]) -> Any:
    if body is None or body == "" or body == b"":
        raise _InvalidPayload("empty body")
    try:
        data = json.loads(body) if isinstance(body, (str, bytes)) else body
        if not isinstance(data, dict):
            raise _InvalidPayload("body is not a JSON object")
        return schema.model_validate(data)
    except (json.JSONDecodeError, UnicodeDecodeError, pydantic.ValidationError) as exc:
        raise _InvalidPayload(str(exc)) from exc


class RequestRouter:
    """Map route names onto credential service operations."""

    def __init__(self, service: CredentialService) -> None:
        self._service = service
        self._routes: Dict[str, Callable[..., BaseModel]] = {
            GENERATE_TOKEN: self._generate_token,
            LIST_TOKENS: self._list_tokens,
            DELETE_TOKEN: self._delete_token,
        }

    def dispatch(
        self,
        route: str,
        body: RequestBody,
        *,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> RouterResponse:
        """Run the operation named by ``route`` and translate its outcome."""
        name = normalize_route(route)
        handler = self._routes.get(name)
        if handler is None:
            logger.info("Unknown route requested: %s", route)
            return RouterResponse(HTTPStatus.NOT_FOUND, _NOT_FOUND.model_dump())

        try:
            result = handler(body, should_stop)
        except (_InvalidPayload, ValidationError) as exc:
            logger.warning("Rejected %s request: %s", name, exc)
            return RouterResponse(HTTPStatus.BAD_REQUEST, _INVALID_INPUT.model_dump())
        except OperationCancelled as exc:
            logger.warning("%s request cancelled: %s", name, exc)
            return RouterResponse(HTTPStatus.SERVICE_UNAVAILABLE, _CANCELLED.model_dump())
        except (KeyProviderError, StoreError):
            logger.exception("%s request failed", name)
            return RouterResponse(
                HTTPStatus.INTERNAL_SERVER_ERROR, _INTERNAL_ERROR.model_dump()
            )

        return RouterResponse(HTTPStatus.OK, result.model_dump())

    def _generate_token(
        self, body: RequestBody, should_stop: Optional[Callable[[], bool]]
    ) -> GenerateTokenResponse:
        request = _parse(body, GenerateTokenRequest)
        token = self._service.issue(request.repoid, request.username, request.expiration)
        return GenerateTokenResponse(token=token)

    def _list_tokens(
        self, body: RequestBody, should_stop: Optional[Callable[[], bool]]
    ) -> ListTokensResponse:
        request = _parse(body, ListTokensRequest)
        records = self._service.list(
            request.repoid, request.username, should_stop=should_stop
        )
        return ListTokensResponse(items=[TokenItem.from_record(r) for r in records])

    def _delete_token(
        self, body: RequestBody, should_stop: Optional[Callable[[], bool]]
    ) -> DeleteTokenResponse:
        request = _parse(body, DeleteTokenRequest)
        return DeleteTokenResponse(success=self._service.revoke(request.token))


__all__ = [
    "DELETE_TOKEN",
    "GENERATE_TOKEN",
    "LIST_TOKENS",
    "RequestRouter",
    "RouterResponse",
    "normalize_route",
]
