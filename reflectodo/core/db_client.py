"""PocketBase client wrapper with CRUD operations for the remote tasks table.

The PocketBase SDK is synchronous, so each request runs in a worker thread to
keep the event loop free. The first call also authenticates on that thread.
"""

import asyncio
import logging
from typing import Any

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError

from reflectodo.core.config import constants, settings


logger = logging.getLogger(__name__)


class DatabaseError(RuntimeError):
    """Raised when a remote table operation fails."""


class RecordNotFoundError(KeyError):
    """Raised when a record id does not exist in the remote table."""


_client: PocketBase | None = None


def get_client() -> PocketBase:
    """Return the shared PocketBase client, authenticating as admin when credentials are configured."""
    global _client  # noqa: PLW0603
    if _client is None:
        client = PocketBase(settings.pocketbase_url)
        if settings.pocketbase_admin_email and settings.pocketbase_admin_password:
            try:
                client.admins.auth_with_password(settings.pocketbase_admin_email, settings.pocketbase_admin_password)
            except ClientResponseError as e:
                logger.error("pocketbase_auth_failed", extra={"url": settings.pocketbase_url, "error": str(e)})
                msg = f"Authentication failed against {settings.pocketbase_url}: {e}"
                raise DatabaseError(msg) from e
        _client = client
        logger.info("Created PocketBase client", extra={"url": settings.pocketbase_url})
    return _client


def reset_client() -> None:
    """Drop the cached client so the next call reconnects with current settings."""
    global _client  # noqa: PLW0603
    _client = None


def _record_to_dict(record: Any) -> dict[str, Any]:
    """Flatten an SDK record into a plain dictionary."""
    return dict(record.__dict__)


def _records(collection: str) -> Any:
    return get_client().collection(collection)


def _is_not_found(error: ClientResponseError) -> bool:
    return error.status == constants.HTTP_NOT_FOUND


async def create_record(*, collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a new record and return the row as stored by the server."""
    try:
        record = await asyncio.to_thread(lambda: _records(collection).create(data))
    except ClientResponseError as e:
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create record in {collection}: {e}"
        raise DatabaseError(msg) from e

    result = _record_to_dict(record)
    logger.info("Created record", extra={"collection": collection, "record_id": result.get("id")})
    return result


async def update_record(*, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Update a record by ID and return the updated row."""
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    try:
        record = await asyncio.to_thread(lambda: _records(collection).update(record_id, data))
    except ClientResponseError as e:
        if _is_not_found(e):
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg) from e
        logger.error("update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to update record in {collection}: {e}"
        raise DatabaseError(msg) from e

    logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
    return _record_to_dict(record)


async def delete_record(*, collection: str, record_id: str) -> None:
    """Delete a record by ID, raising RecordNotFoundError if missing."""
    try:
        await asyncio.to_thread(lambda: _records(collection).delete(record_id))
    except ClientResponseError as e:
        if _is_not_found(e):
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg) from e
        logger.error("delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to delete record from {collection}: {e}"
        raise DatabaseError(msg) from e

    logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})


async def list_records(
    *,
    collection: str,
    filter_query: str = "",
    sort: str = "",
) -> list[dict[str, Any]]:
    """List every record matching an optional PocketBase filter, in the requested sort order."""
    query_params: dict[str, str] = {}
    if sort:
        query_params["sort"] = sort
    if filter_query:
        query_params["filter"] = filter_query

    try:
        records = await asyncio.to_thread(lambda: _records(collection).get_full_list(query_params=query_params))
    except ClientResponseError as e:
        logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to list records from {collection}: {e}"
        raise DatabaseError(msg) from e

    results = [_record_to_dict(record) for record in records]
    logger.info("Listed records", extra={"collection": collection, "count": len(results)})
    return results
