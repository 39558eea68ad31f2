try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import base64
from datetime import datetime, timedelta, timezone

import pytest

from patservice.clients.dynamodb import DynamoDBTokenStore
from patservice.clients.kms import KMSKeyProvider
from patservice.core.config import AWSSettings
from patservice.core.errors import KeyProviderError, StoreError, ValidationError
from patservice.services.credentials import CredentialService, to_epoch_seconds

from .fakes import FakeKMSClient, FakeTokenTable, client_error

EXPIRES = 1_893_456_000


@pytest.fixture()
def backend():
    settings = AWSSettings(DYNAMODB_TABLE_NAME="tokens", KMS_KEY_ID="alias/pat-key")
    kms = FakeKMSClient()
    table = FakeTokenTable(page_size=3)
    service = CredentialService(
        key_provider=KMSKeyProvider(settings, client=kms),
        token_store=DynamoDBTokenStore(settings, table=table),
    )
    return service, kms, table


def test_issue_returns_plaintext_and_stores_ciphertext(backend) -> None:
    service, _, table = backend

    token = service.issue("repo-42", "alice", EXPIRES)

    assert token
    (stored,) = table.items.values()
    assert stored["token"] != token
    plaintext = base64.b64decode(token)
    assert base64.b64decode(stored["token"]) == FakeKMSClient.PREFIX + plaintext
    assert stored["repoID"] == "repo-42"
    assert stored["username"] == "alice"
    assert stored["expiration"] == EXPIRES


def test_issue_uses_a_new_key_pair_each_time(backend) -> None:
    service, kms, table = backend

    first = service.issue("repo-1", "alice", EXPIRES)
    second = service.issue("repo-1", "alice", EXPIRES)

    assert first != second
    assert len(kms.calls) == 2
    assert len(table.items) == 2


def test_issue_accepts_datetime_expiration(backend) -> None:
    service, _, table = backend

    service.issue("repo-1", "alice", datetime(2030, 1, 1))

    (stored,) = table.items.values()
    assert stored["expiration"] == EXPIRES


def test_list_returns_every_record_across_pages(backend) -> None:
    service, _, _ = backend
    for index in range(10):
        service.issue("repo-1", f"user-{index % 3}", EXPIRES + index)

    records = service.list("repo-1")

    assert len(records) == 10
    assert len({r.token for r in records}) == 10


def test_list_filters_by_username(backend) -> None:
    service, _, _ = backend
    service.issue("repo-1", "alice", EXPIRES)
    service.issue("repo-1", "bob", EXPIRES)

    assert [r.username for r in service.list("repo-1", "alice")] == ["alice"]
    assert sorted(r.username for r in service.list("repo-1")) == ["alice", "bob"]
    assert sorted(r.username for r in service.list("repo-1", "")) == ["alice", "bob"]


def test_blank_username_filter_is_matched_literally(backend) -> None:
    service, _, _ = backend
    service.issue("repo-1", "alice", EXPIRES)

    assert service.list("repo-1", "  ") == []

    with pytest.raises(ValidationError):
        service.list("  ")


def test_revoke_is_idempotent(backend) -> None:
    service, _, _ = backend
    service.issue("repo-1", "alice", EXPIRES)
    (record,) = service.list("repo-1")

    assert service.revoke(record.token) is True
    assert service.revoke(record.token) is True
    assert service.list("repo-1") == []
    assert service.list("repo-1", "alice") == []


def test_expired_records_remain_listed(backend) -> None:
    service, _, _ = backend
    past = datetime.now(timezone.utc) - timedelta(days=1)

    service.issue("repo-1", "alice", past)

    assert len(service.list("repo-1")) == 1


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.issue("", "u", EXPIRES),
        lambda s: s.issue("r", "", EXPIRES),
        lambda s: s.issue("r", "   ", EXPIRES),
        lambda s: s.list(""),
        lambda s: s.revoke(""),
    ],
)
def test_incomplete_input_is_rejected_without_mutation(backend, call) -> None:
    service, kms, table = backend

    with pytest.raises(ValidationError):
        call(service)

    assert table.items == {}
    assert table.queries == []
    assert kms.calls == []


def test_key_provider_failure_leaves_store_untouched(backend) -> None:
    service, kms, table = backend
    kms.error = client_error("GenerateDataKey", "DisabledException")

    with pytest.raises(KeyProviderError):
        service.issue("repo-1", "alice", EXPIRES)

    assert table.items == {}


def test_store_failure_propagates(backend) -> None:
    service, _, table = backend
    table.fail_writes = True

    with pytest.raises(StoreError):
        service.issue("repo-1", "alice", EXPIRES)
    with pytest.raises(StoreError):
        service.revoke("ciphertext")


def test_to_epoch_seconds_conversions() -> None:
    assert to_epoch_seconds(EXPIRES) == EXPIRES
    assert to_epoch_seconds(datetime(2030, 1, 1, tzinfo=timezone.utc)) == EXPIRES
    assert (
        to_epoch_seconds(datetime(2030, 1, 1, 2, tzinfo=timezone(timedelta(hours=2))))
        == EXPIRES
    )
    with pytest.raises(ValidationError):
        to_epoch_seconds("2030-01-01")  # type: ignore[arg-type]
