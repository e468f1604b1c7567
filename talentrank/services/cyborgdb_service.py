"""CyborgDB integration service for applicant profile vector search."""

import logging
import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import List, Dict, Any, Optional, Sequence

from cyborgdb import Client

from ..config import get_settings

logger = logging.getLogger(__name__)


class CyborgDBService:
    """Service for similarity search over the encrypted applicant profile index."""

    def __init__(self):
        """Initialize CyborgDB service."""
        self.settings = get_settings()
        self._client: Optional[Client] = None
        self._index = None
        self._executor = ThreadPoolExecutor(max_workers=4)
        self.index_name = self.settings.cyborgdb_index_name
        self.timeout_seconds = self.settings.vector_search_timeout_seconds

    def _get_client(self) -> Client:
        """
        Get or create CyborgDB client.

        Returns:
            CyborgDB Client instance
        """
        if self._client is None:
            base_url = f"http://{self.settings.cyborgdb_host}:{self.settings.cyborgdb_port}"
            self._client = Client(
                base_url=base_url,
                api_key=self.settings.cyborgdb_api_key
            )
            logger.info(f"CyborgDB client initialized with base_url: {base_url}")
        return self._client

    def _get_index_key(self) -> bytes:
        """
        Get the index key from the file named by CYBORGDB_INDEX_KEY_FILE.

        Returns:
            Index key as bytes

        Raises:
            RuntimeError: If the key file is not configured or cannot be read
        """
        key_file_path = self.settings.cyborgdb_index_key_file
        if not key_file_path:
            raise RuntimeError("CYBORGDB_INDEX_KEY_FILE environment variable is not set")

        try:
            with open(key_file_path, "rb") as key_file:
                return key_file.read().strip()
        except FileNotFoundError:
            raise RuntimeError(f"Index key file not found: {key_file_path}")
        except OSError as e:
            raise RuntimeError(f"Failed to read index key file: {e}")

    async def _get_index(self):
        """
        Load the existing profile index.

        The index is built and maintained elsewhere; a missing index is an error.

        Returns:
            CyborgDB index instance
        """
        if self._index is None:
            client = self._get_client()
            index_key = self._get_index_key()
            loop = asyncio.get_running_loop()
            try:
                self._index = await asyncio.wait_for(
                    loop.run_in_executor(
                        self._executor,
                        lambda: client.load_index(self.index_name, index_key)
                    ),
                    timeout=self.timeout_seconds,
                )
                logger.info(f"Loaded CyborgDB index: {self.index_name}")
            except asyncio.TimeoutError:
                logger.warning(f"Loading index {self.index_name} timed out after {self.timeout_seconds}s")
                raise
            except Exception as e:
                logger.error(f"Failed to load index {self.index_name}: {e}")
                raise RuntimeError(f"Failed to load index: {e}")

        return self._index

    async def similarity_search(
        self,
        query_vector: Sequence[float],
        k: int,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Find the nearest profiles to a query embedding.

        Args:
            query_vector: Query embedding
            k: Maximum number of neighbours to return
            filters: Metadata equality filter, e.g. {"user_type": "applicant"}

        Returns:
            List of {"id", "score"} dicts in index order

        Raises:
            RuntimeError: If the search fails
            asyncio.TimeoutError: If the index does not answer in time
        """
        index = await self._get_index()
        vector = query_vector.tolist() if hasattr(query_vector, "tolist") else list(query_vector)

        loop = asyncio.get_running_loop()
        try:
            search_results = await asyncio.wait_for(
                loop.run_in_executor(
                    self._executor,
                    lambda: index.query(
                        query_vectors=vector,
                        top_k=k,
                        filters=filters,
                        include=["distance", "metadata"]
                    )
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Profile search timed out after {self.timeout_seconds}s")
            raise
        except Exception as e:
            logger.error(f"Failed to search profiles in CyborgDB: {e}")
            raise RuntimeError(f"Profile search failed: {str(e)}")

        processed_results = []
        for result in search_results or []:
            metadata = result.get("metadata") or {}
            processed_results.append({
                # Profile id lives in metadata; fall back to the item id
                "id": metadata.get("id") or result.get("id"),
                "score": 1.0 - float(result.get("distance", 1.0)),  # Convert distance to similarity
            })

        logger.info(f"Found {len(processed_results)} similar profiles for query")
        return processed_results

    async def health_check(self) -> bool:
        """
        Check if CyborgDB is healthy and accessible.

        Returns:
            True if CyborgDB is healthy
        """
        try:
            client = self._get_client()

            loop = asyncio.get_running_loop()
            health = await loop.run_in_executor(
                self._executor,
                lambda: client.get_health()
            )

            return health.get("status") == "ok"

        except Exception as e:
            logger.error(f"CyborgDB health check failed: {e}")
            return False
