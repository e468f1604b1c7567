"""Conversation history updates and the pipeline trace."""

from typing import List, Sequence

from ..models.ranking import ConversationTurn, PipelineTrace, RetrievalMethod, RerankMethod


def summary_message(ranked_count: int) -> str:
    return f"Found {ranked_count} candidates matching your criteria."


def record(history: Sequence[ConversationTurn], raw_query: str, ranked_count: int) -> List[ConversationTurn]:
    """Return a new history with the user turn and the assistant summary appended."""
    return [
        *history,
        ConversationTurn(role="user", content=raw_query),
        ConversationTurn(role="assistant", content=summary_message(ranked_count)),
    ]


def record_user_turn(history: Sequence[ConversationTurn], raw_query: str) -> List[ConversationTurn]:
    """Return a new history with only the user turn appended (empty-result response)."""
    return [*history, ConversationTurn(role="user", content=raw_query)]


def build_trace(
    retrieval_method: RetrievalMethod,
    pool_size: int,
    rerank_method: RerankMethod,
    ranked_count: int,
) -> PipelineTrace:
    """Informational trace of both stages; never used for control flow."""
    return PipelineTrace(
        stage1=f"{retrieval_method.value} ({pool_size} candidates)",
        stage2=f"{rerank_method.value} ({ranked_count} ranked results)",
    )
