"""Builds the enriched query string sent to both ranking stages."""

import logging
from typing import Optional, Sequence

from ..models.ranking import ConversationTurn, JobContext
from .errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_TURNS = 3


def validate_query(raw_query: Optional[str]) -> str:
    """
    Ensure the raw query is usable.

    Args:
        raw_query: Query text as supplied by the caller

    Returns:
        The query unchanged

    Raises:
        ValidationError: If the query is missing or blank
    """
    if raw_query is None or not raw_query.strip():
        raise ValidationError("Search query is required")
    return raw_query


def render_history(history: Sequence[ConversationTurn], turns: int = DEFAULT_CONTEXT_TURNS) -> str:
    """Render the last ``turns`` history entries as ``role: content`` lines."""
    recent = list(history)[-turns:] if turns > 0 else []
    return "\n".join(f"{turn.role}: {turn.content}" for turn in recent)


def render_job_context(job_context: JobContext) -> str:
    """Render job context as a single summary line."""
    skills = ", ".join(job_context.required_skills)
    return (
        f"Job Context - Title: {job_context.title}, "
        f"Description: {job_context.description}, "
        f"Skills: {skills}"
    )


def compose_query(
    raw_query: str,
    history: Optional[Sequence[ConversationTurn]] = None,
    job_context: Optional[JobContext] = None,
    context_turns: int = DEFAULT_CONTEXT_TURNS,
) -> str:
    """
    Compose the enriched query from raw input, recent turns and job context.

    Job context is always the outermost block, followed by the history block
    and finally the raw query.

    Args:
        raw_query: Free-text recruiter query
        history: Caller-supplied conversation history
        job_context: Optional job posting details
        context_turns: Number of trailing history turns to include

    Returns:
        Enriched query string

    Raises:
        ValidationError: If the raw query is blank
    """
    validate_query(raw_query)

    composed = raw_query
    if history and context_turns > 0:
        context = render_history(history, context_turns)
        composed = f"Previous context:\n{context}\n\nCurrent request: {raw_query}"

    if job_context is not None:
        composed = f"{render_job_context(job_context)}\n\n{composed}"

    logger.debug(f"Composed query: {len(composed)} characters")
    return composed
