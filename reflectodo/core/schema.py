"""PocketBase schema management for the remote tasks table (code-first approach)."""

import logging
from typing import Any

import httpx
from pocketbase import PocketBase
from pocketbase.client import ClientResponseError

from reflectodo.core.config import constants, settings


logger = logging.getLogger(__name__)


# API rule keys that can be set on collections
_API_RULE_KEYS = ("listRule", "viewRule", "createRule", "updateRule", "deleteRule")


def get_tasks_schema(collection_name: str | None = None) -> dict[str, Any]:
    """Expected schema for the tasks collection.

    PocketBase v0.22+ uses 'fields' instead of 'schema' for field definitions,
    with field options flattened onto the field object.
    """
    name = collection_name or settings.tasks_collection
    return {
        "name": name,
        "type": "base",
        "system": False,
        # Single-user deployment: the app talks to the table directly.
        "listRule": "",
        "viewRule": "",
        "createRule": "",
        "updateRule": "",
        "deleteRule": "",
        "fields": [
            {"name": "title", "type": "text", "required": True},
            {"name": "description", "type": "text", "required": False},
            {
                "name": "priority",
                "type": "select",
                "required": True,
                "values": ["low", "medium", "high"],
                "maxSelect": 1,
            },
            {"name": "due_date", "type": "date", "required": False},
            # required=False: PocketBase rejects False on required bool fields
            {"name": "completed", "type": "bool", "required": False},
            {"name": "completed_at", "type": "date", "required": False},
            {"name": "reflection", "type": "text", "required": False},
            {"name": "created_at", "type": "date", "required": True},
        ],
        "indexes": [
            f"CREATE INDEX idx_{name}_created_at ON {name} (created_at)",
            f"CREATE INDEX idx_{name}_completed_at ON {name} (completed_at)",
        ],
    }


async def _collection_exists(*, client: httpx.AsyncClient, collection_name: str) -> bool:
    try:
        response = await client.get(f"/api/collections/{collection_name}")
        return response.is_success
    except httpx.HTTPError:
        return False


async def _create_collection(*, client: httpx.AsyncClient, schema: dict[str, Any]) -> None:
    response = await client.post("/api/collections", json=schema)
    response.raise_for_status()
    logger.info("Created collection: %s", schema["name"])


def merge_fields(
    schema: dict[str, Any],
    current: dict[str, Any],
) -> tuple[list[dict[str, Any]], list[str]]:
    """Merge desired fields into the existing ones, keeping fields we do not manage.

    Returns:
        Tuple of (merged_fields, fields_added).
    """
    existing_names = {field["name"] for field in current.get("fields", [])}
    desired = {field["name"]: field for field in schema.get("fields", [])}

    merged = [desired.get(field["name"], field) for field in current.get("fields", [])]
    added = [name for name in desired if name not in existing_names]
    merged.extend(desired[name] for name in added)
    return merged, added


def rules_to_update(schema: dict[str, Any], current: dict[str, Any]) -> dict[str, str | None]:
    """API rules whose desired value differs from the server's."""
    return {key: schema[key] for key in _API_RULE_KEYS if key in schema and schema[key] != current.get(key)}


async def _update_collection(*, client: httpx.AsyncClient, schema: dict[str, Any]) -> None:
    collection_name = schema["name"]
    response = await client.get(f"/api/collections/{collection_name}")
    response.raise_for_status()
    current = response.json()

    merged_fields, fields_added = merge_fields(schema, current)
    rules = rules_to_update(schema, current)
    existing_indexes = list(current.get("indexes", []))
    new_indexes = [idx for idx in schema.get("indexes", []) if idx not in existing_indexes]

    if not fields_added and not rules and not new_indexes:
        logger.info("Collection %s schema is already up to date", collection_name)
        return

    payload: dict[str, Any] = {"fields": merged_fields, **rules}
    if new_indexes:
        payload["indexes"] = existing_indexes + new_indexes

    response = await client.patch(f"/api/collections/{collection_name}", json=payload)
    response.raise_for_status()
    logger.info(
        "Updated collection %s",
        collection_name,
        extra={"fields_added": fields_added, "rules": list(rules), "indexes_added": len(new_indexes)},
    )


async def sync_schema(
    pocketbase_url: str | None = None,
    admin_email: str | None = None,
    admin_password: str | None = None,
) -> None:
    """Create or update the tasks collection so it matches the task model (idempotent).

    Raises:
        ValueError: If admin credentials are not configured
        ClientResponseError: If admin authentication fails
        httpx.HTTPStatusError: If the admin API rejects a collection change
    """
    url = pocketbase_url or settings.pocketbase_url
    email = admin_email or settings.require_credential("pocketbase_admin_email", "PocketBase admin")
    password = admin_password or settings.require_credential("pocketbase_admin_password", "PocketBase admin")

    logger.info("Starting PocketBase schema sync...")
    client = PocketBase(url)
    try:
        client.admins.auth_with_password(email, password)
    except ClientResponseError as e:
        logger.error("Failed to authenticate as admin", extra={"url": url, "error": str(e)})
        raise

    schema = get_tasks_schema()
    async with httpx.AsyncClient(base_url=url, timeout=constants.API_TIMEOUT_SECONDS) as http_client:
        http_client.headers["Authorization"] = f"Bearer {client.auth_store.token}"

        if await _collection_exists(client=http_client, collection_name=schema["name"]):
            await _update_collection(client=http_client, schema=schema)
        else:
            await _create_collection(client=http_client, schema=schema)

    logger.info("PocketBase schema sync complete")
