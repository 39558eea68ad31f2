"""
DynamoDB-backed token table with a (repoID, username) secondary index.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from patservice.core.config import AWSSettings
from patservice.core.errors import OperationCancelled, StoreError
from patservice.models import TokenRecord

logger = logging.getLogger(__name__)


class DynamoDBTokenStore:
    """Point writes, point deletes and paginated index reads on the token table."""

    def __init__(self, settings: AWSSettings, table: Optional[Any] = None) -> None:
        self._index_name = settings.repo_index_name
        self._page_size = settings.query_page_size
        if table is None:
            resource = boto3.resource("dynamodb", region_name=settings.region_name)
            table = resource.Table(settings.dynamodb_table_name)
        self._table = table

    def put(self, record: TokenRecord) -> None:
        """Upsert a record keyed by its token."""
        try:
            self._table.put_item(Item=record.to_item())
        except (BotoCoreError, ClientError) as exc:
            logger.warning("PutItem failed for repo %s: %s", record.repo_id, exc)
            raise StoreError("Unable to persist token record.") from exc

    def query_by_repo(
        self,
        repo_id: str,
        username: Optional[str] = None,
        *,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[TokenRecord]:
        """
        Return every record for ``repo_id`` (optionally one ``username``).

        Pages are read sequentially, each resuming from the previous page's
        ``LastEvaluatedKey``, until DynamoDB stops returning one.
        """
        condition = Key("repoID").eq(repo_id)
        if username:
            condition = condition & Key("username").eq(username)

        records: List[TokenRecord] = []
        start_key: Optional[Dict[str, Any]] = None
        pages = 0
        while True:
            if should_stop is not None and should_stop():
                raise OperationCancelled(
                    f"Query for repo {repo_id} cancelled after {pages} page(s)."
                )

            params: Dict[str, Any] = {
                "IndexName": self._index_name,
                "KeyConditionExpression": condition,
            }
            if self._page_size:
                params["Limit"] = self._page_size
            if start_key is not None:
                params["ExclusiveStartKey"] = start_key

            try:
                response = self._table.query(**params)
            except (BotoCoreError, ClientError) as exc:
                logger.warning("Query page %d failed for repo %s: %s", pages + 1, repo_id, exc)
                raise StoreError("Unable to query token records.") from exc

            pages += 1
            records.extend(TokenRecord.from_item(item) for item in response.get("Items", []))
            start_key = response.get("LastEvaluatedKey")
            if start_key is None:
                break

        logger.debug("Read %d token(s) for repo %s in %d page(s)", len(records), repo_id, pages)
        return records

    def delete_by_token(self, token: str) -> bool:
        """Delete a record; an already-absent token still counts as success."""
        try:
            self._table.delete_item(Key={"token": token})
        except (BotoCoreError, ClientError) as exc:
            logger.warning("DeleteItem failed: %s", exc)
            raise StoreError("Unable to delete token record.") from exc
        return True


__all__ = ["DynamoDBTokenStore"]
