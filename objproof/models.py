"""Data model shared by the orchestrator, the registry and the collaborators."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

IterationStatus = Literal["processing", "completed", "failed"]
LengthMode = Literal[
    "heavy_compression",
    "moderate_compression",
    "maintain",
    "moderate_expansion",
    "heavy_expansion",
]
CoherenceScore = Literal["pass", "needs_review", "short-text"]


def count_words(text: str) -> int:
    """Count whitespace-separated tokens."""
    return len(text.split())


@dataclass
class GlobalSkeleton:
    """Whole-document outline every chunk rewrite is held to."""

    thesis: str
    outline: list[str] = field(default_factory=list)
    key_terms: list[str] = field(default_factory=list)
    commitments: list[str] = field(default_factory=list)


@dataclass
class Chunk:
    index: int
    text: str
    word_count: int = 0


@dataclass
class ChunkDelta:
    """How one chunk's content moved relative to its source and the skeleton."""

    index: int
    claims_added: list[str] = field(default_factory=list)
    claims_removed: list[str] = field(default_factory=list)
    terms_used: list[str] = field(default_factory=list)
    notes: str = ""


@dataclass
class ChunkResult:
    output_text: str
    delta: ChunkDelta


@dataclass
class ProcessedChunk:
    text: str
    delta: ChunkDelta


@dataclass
class StitchResult:
    contradictions: list[dict] = field(default_factory=list)


@dataclass(frozen=True)
class TargetWindow:
    target_min: int
    target_max: int


@dataclass(frozen=True)
class LengthConfig:
    target_min: int
    target_max: int
    target_mid: int
    length_ratio: float
    length_mode: LengthMode
    chunk_target_words: int


@dataclass
class Iteration:
    """One rewrite attempt and its place in a lineage.

    Only ``complete`` and ``fail`` change ``status``, and each may happen
    once, from ``processing``.
    """

    input_text: str
    parent_id: str | None = None
    version: int = 1
    target_word_count: int | None = None
    custom_instructions: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    output_text: str = ""
    word_count: int = 0
    global_skeleton: GlobalSkeleton | None = None
    status: IterationStatus = "processing"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if not self.word_count:
            self.word_count = count_words(self.input_text)

    def complete(self, output_text: str) -> None:
        self._leave_processing("completed")
        self.output_text = output_text
        self.word_count = count_words(output_text)

    def fail(self) -> None:
        self._leave_processing("failed")
        self.output_text = ""

    def _leave_processing(self, status: IterationStatus) -> None:
        if self.status != "processing":
            raise RuntimeError(
                f"Iteration {self.id} is already {self.status}; cannot mark it {status}."
            )
        self.status = status


@dataclass
class RewriteRequest:
    text: str
    target_word_count: int | None = None
    custom_instructions: str | None = None
    parent_iteration_id: str | None = None


@dataclass
class ProcessingStats:
    input_words: int
    output_words: int
    chunks_processed: int
    coherence_score: CoherenceScore
    contradictions: list[dict] = field(default_factory=list)


@dataclass
class RewriteResult:
    success: bool
    iteration: Iteration
    processing_stats: ProcessingStats | None = None
    error: str | None = None
    error_kind: str | None = None
