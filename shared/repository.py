"""
Base repository class for remote database access.

Encapsulates Supabase client access and error translation so concrete
repositories only deal with table names and row mapping.
"""

import logging
from typing import Any, Callable, TypeVar, Generic
from supabase import Client

from .exceptions import StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for Supabase-backed repositories.

    Provides:
    - Supabase client access via self._db
    - _execute(): runs a query builder and converts client failures into
      StorageError so callers see one storage failure type

    Subclasses implement domain-specific data access methods and handle
    dict-to-Pydantic model mapping internally.

    Example:
        class AccountRepository(BaseRepository[UserAccount]):
            def get(self, account_id: str) -> Optional[UserAccount]:
                result = self._execute(
                    lambda: self._db.table("users").select("*").eq("id", account_id).execute()
                )
                if not result.data:
                    return None
                return self._map_to_account(result.data[0])
    """

    store_name = "supabase"

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    def _execute(self, query: Callable[[], Any]) -> Any:
        """Run a query, re-raising client failures as StorageError."""
        try:
            return query()
        except StorageError:
            raise
        except Exception as e:
            logger.warning(f"{self.store_name} query failed: {e}")
            raise self._storage_error(e) from e

    def _storage_error(self, cause: Exception) -> StorageError:
        """Build the error raised for a failed query. Subclasses narrow the type."""
        return StorageError(
            f"{self.store_name} unavailable: {cause}",
            store=self.store_name,
        )
