try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64
import json

import pytest

from functions.management_lambda import handler
from patservice.api.dispatcher import RequestRouter
from patservice.clients.dynamodb import DynamoDBTokenStore
from patservice.clients.kms import KMSKeyProvider
from patservice.core.config import AWSSettings
from patservice.services import CredentialService

from .fakes import FakeKMSClient, FakeTokenTable


class FakeLambdaContext:
    aws_request_id = "req-1"

    def __init__(self, remaining_ms: int = 30_000) -> None:
        self.remaining_ms = remaining_ms

    def get_remaining_time_in_millis(self) -> int:
        return self.remaining_ms


@pytest.fixture()
def table(monkeypatch: pytest.MonkeyPatch) -> FakeTokenTable:
    settings = AWSSettings(DYNAMODB_TABLE_NAME="tokens", KMS_KEY_ID="alias/pat-key")
    fake_table = FakeTokenTable(page_size=2)
    router = RequestRouter(
        CredentialService(
            key_provider=KMSKeyProvider(settings, client=FakeKMSClient()),
            token_store=DynamoDBTokenStore(settings, table=fake_table),
        )
    )
    monkeypatch.setattr(handler, "_bootstrap", lambda: router)
    return fake_table


def _event(path: str, body, *, encode: bool = False) -> dict:
    raw = json.dumps(body) if not isinstance(body, str) else body
    if encode:
        raw = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return {"rawPath": path, "body": raw, "isBase64Encoded": encode}


def test_generate_token_event(table: FakeTokenTable) -> None:
    response = handler.lambda_handler(
        _event(
            "/api/GenerateToken",
            {"repoid": "repo-42", "username": "alice", "expiration": "2030-01-01T00:00:00Z"},
        ),
        FakeLambdaContext(),
    )

    assert response["statusCode"] == 200
    assert response["headers"]["Content-Type"] == "application/json"
    assert json.loads(response["body"])["token"]
    (stored,) = table.items.values()
    assert stored["expiration"] == 1893456000


def test_base64_encoded_body_is_decoded(table: FakeTokenTable) -> None:
    handler.lambda_handler(
        _event(
            "/api/GenerateToken",
            {"repoid": "repo-42", "username": "alice", "expiration": "2030-01-01"},
            encode=True,
        ),
        FakeLambdaContext(),
    )

    response = handler.lambda_handler(
        _event("/api/ListTokensByRepoID", {"repoid": "repo-42"}, encode=True),
        FakeLambdaContext(),
    )

    assert response["statusCode"] == 200
    assert len(json.loads(response["body"])["items"]) == 1


def test_missing_body_is_invalid_input(table: FakeTokenTable) -> None:
    response = handler.lambda_handler({"rawPath": "/api/DeleteToken"}, FakeLambdaContext())

    assert response["statusCode"] == 400
    assert json.loads(response["body"]) == {"message": "Invalid input."}


def test_unknown_path_is_not_found(table: FakeTokenTable) -> None:
    response = handler.lambda_handler(_event("/api/Unknown", {}), FakeLambdaContext())

    assert response["statusCode"] == 404


def test_listing_stops_when_invocation_is_nearly_out_of_time(table: FakeTokenTable) -> None:
    for username in ("a", "b", "c"):
        handler.lambda_handler(
            _event(
                "/api/GenerateToken",
                {"repoid": "r", "username": username, "expiration": "2030-01-01"},
            ),
            FakeLambdaContext(),
        )

    response = handler.lambda_handler(
        _event("/api/ListTokensByRepoID", {"repoid": "r"}),
        FakeLambdaContext(remaining_ms=10),
    )

    assert response["statusCode"] == 503
    assert table.queries == []
