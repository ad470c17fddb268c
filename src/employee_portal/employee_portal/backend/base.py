from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from postgrest.exceptions import APIError
from storage3.utils import StorageException
from supabase_auth.errors import AuthError

from ..core.exceptions import AuthenticationError, BackendError

logger = logging.getLogger(__name__)


@contextmanager
def backend_call(action: str) -> Iterator[None]:
    """Translate Supabase client errors into domain errors.

    Usage::

        with backend_call("load schedule"):
            resp = client.table("schedules").select("*").eq("id", sid).execute()
    """

    try:
        yield
    except APIError as e:
        logger.error("Backend error during %s: %s", action, e.message)
        raise BackendError(e.message or f"Failed to {action}") from e
    except AuthError as e:
        logger.warning("Auth error during %s: %s", action, e.message)
        raise AuthenticationError(e.message or "Unauthorized") from e
    except StorageException as e:
        logger.error("Storage error during %s: %s", action, e)
        raise BackendError(f"Failed to {action}") from e


def rows(resp) -> List[Dict[str, Any]]:
    if resp is None:
        return []
    data = resp.data
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return list(data)


def first(resp) -> Optional[Dict[str, Any]]:
    """First row of a response, tolerating ``maybe_single()`` returning ``None``."""
    items = rows(resp)
    return items[0] if items else None


def nested(row: Optional[Dict[str, Any]], *path: str) -> Any:
    """Walk embedded resources (``employees -> profiles -> email``).

    PostgREST embeds to-one relations as objects and to-many as lists; lists take their first item.
    """

    current: Any = row
    for key in path:
        if isinstance(current, list):
            current = current[0] if current else None
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    if isinstance(current, list):
        return current[0] if current else None
    return current
