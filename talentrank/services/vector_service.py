"""Query embedding service for the TalentRank service."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np
from sentence_transformers import SentenceTransformer

from ..config import get_settings

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Service for turning query text into normalized embedding vectors."""

    def __init__(self, model_name: Optional[str] = None, timeout_seconds: Optional[float] = None):
        """
        Initialize the embedding service with a sentence transformer model.

        Args:
            model_name: Name of the sentence transformer model to use
            timeout_seconds: Per-call timeout for async embedding
        """
        settings = get_settings()
        self.model_name = model_name or settings.vector_model_name
        self.timeout_seconds = timeout_seconds or settings.embedding_timeout_seconds
        self._model: Optional[SentenceTransformer] = None
        self._executor = ThreadPoolExecutor(max_workers=2)

    def _get_model(self) -> SentenceTransformer:
        """
        Lazy load the sentence transformer model.

        Returns:
            Loaded sentence transformer model
        """
        if self._model is None:
            logger.info(f"Loading sentence transformer model: {self.model_name}")
            self._model = SentenceTransformer(self.model_name)
            logger.info("Model loaded successfully")
        return self._model

    def generate_vector(self, text: str) -> np.ndarray:
        """
        Generate vector embedding from text content.

        Args:
            text: Input text to vectorize

        Returns:
            Vector embedding as numpy array

        Raises:
            ValueError: If text is empty or invalid
            RuntimeError: If vector generation fails
        """
        if not text or not text.strip():
            raise ValueError("Text content cannot be empty")

        try:
            model = self._get_model()

            # Collapse whitespace before encoding
            cleaned_text = " ".join(text.strip().split())

            vector = model.encode(cleaned_text, convert_to_numpy=True)

            # Ensure vector is normalized (unit length)
            vector_norm = np.linalg.norm(vector)
            if vector_norm > 0:
                vector = vector / vector_norm

            logger.info(f"Generated vector with dimensions: {vector.shape}")
            return vector

        except Exception as e:
            logger.error(f"Vector generation failed: {e}")
            raise RuntimeError(f"Failed to generate vector: {str(e)}")

    async def embed(self, text: str) -> np.ndarray:
        """
        Generate an embedding off the event loop with a timeout.

        Raises:
            asyncio.TimeoutError: If the model does not answer in time
            RuntimeError: If vector generation fails
        """
        loop = asyncio.get_running_loop()
        return await asyncio.wait_for(
            loop.run_in_executor(self._executor, self.generate_vector, text),
            timeout=self.timeout_seconds,
        )
