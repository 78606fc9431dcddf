"""Pipeline State — passed between the nodes of the chunked rewrite graph."""

from typing import TypedDict

from objproof.models import Chunk, GlobalSkeleton, LengthConfig, ProcessedChunk


class PipelineState(TypedDict):
    text: str  # Full input text. Immutable.
    custom_instructions: str | None
    length_config: LengthConfig  # Resolved once per run. Immutable.
    skeleton: GlobalSkeleton | None
    chunks: list[Chunk]
    chunk_target_words: int  # Same budget for every chunk in the run.
    chunk_index: int  # Next chunk to reconstruct.
    processed_chunks: list[ProcessedChunk]  # In chunk order.
    running_word_count: int
    pacing_waits: int
    final_output: str
    contradictions: list[dict]
