"""LangGraph StateGraph definition for the chunked rewrite pipeline.

extract_skeleton → chunk_text → reconstruct_chunk ⇄ pace → stitch_chunks

``reconstruct_chunk`` handles one chunk per visit, strictly in order; ``pace`` sits
between two consecutive chunks and never runs after the last one.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from langgraph.graph import END, StateGraph

from objproof.collaborators import Collaborators
from objproof.config import get_config
from objproof.errors import CollaboratorError, call_collaborator
from objproof.models import Iteration, ProcessedChunk, count_words
from objproof.progress import ProgressReporter
from objproof.state import PipelineState

logger = logging.getLogger(__name__)


@dataclass
class PacingPolicy:
    """Fixed wait between consecutive chunk rewrites."""

    delay_seconds: float = 1.5
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def from_config(cls) -> "PacingPolicy":
        return cls(delay_seconds=get_config().get("chunk_pacing_seconds", 1.5))

    def wait(self) -> None:
        if self.delay_seconds > 0:
            self.sleep(self.delay_seconds)


def chunk_progress(index: int, total: int) -> int:
    """Percent reported before chunk ``index``: linear from 20 to 80 over the run."""
    return 20 + (index + 1) * 60 // total


def _route_after_reconstruct(state: PipelineState) -> str:
    """Conditional edge: pace before the next chunk, or stitch after the last."""
    if state["chunk_index"] >= len(state["chunks"]):
        return "stitch"
    return "pace"


def build_chunk_pipeline(
    collaborators: Collaborators,
    reporter: ProgressReporter,
    pacing: PacingPolicy,
    iteration: Iteration,
):
    """Compile the chunked pipeline for one run.

    Nodes close over the run's collaborators, observer, pacing policy and
    iteration; the iteration receives the skeleton as soon as it exists.
    """

    def skeleton_node(state: PipelineState) -> dict:
        reporter.notify("skeleton", "Extracting global skeleton for coherence...", 10)
        skeleton = call_collaborator(
            "Skeleton extraction",
            collaborators.extract_skeleton,
            state["text"],
            state["custom_instructions"],
        )
        iteration.global_skeleton = skeleton
        return {"skeleton": skeleton}

    def chunking_node(state: PipelineState) -> dict:
        reporter.notify("chunking", "Chunking text for processing...", 20)
        chunks = list(call_collaborator("Chunking", collaborators.chunk, state["text"]))
        if not chunks:
            raise CollaboratorError("Chunking produced no chunks.")

        budget = math.ceil(state["length_config"].target_mid / len(chunks))
        logger.info("Split into %d chunks, %d words each", len(chunks), budget)
        return {"chunks": chunks, "chunk_target_words": budget, "chunk_index": 0}

    def reconstruct_node(state: PipelineState) -> dict:
        i = state["chunk_index"]
        chunks = state["chunks"]
        total = len(chunks)

        reporter.notify("processing", f"Processing chunk {i + 1} of {total}...", chunk_progress(i, total))

        result = call_collaborator(
            f"Chunk {i + 1} reconstruction",
            collaborators.reconstruct,
            chunks[i].text,
            i,
            total,
            state["skeleton"],
            state["chunk_target_words"],
            state["length_config"],
        )

        running = state["running_word_count"] + count_words(result.output_text)
        logger.info("Chunk %d/%d done, running total %d words", i + 1, total, running)
        return {
            "processed_chunks": state["processed_chunks"] + [ProcessedChunk(result.output_text, result.delta)],
            "running_word_count": running,
            "chunk_index": i + 1,
        }

    def pace_node(state: PipelineState) -> dict:
        pacing.wait()
        return {"pacing_waits": state["pacing_waits"] + 1}

    def stitch_node(state: PipelineState) -> dict:
        reporter.notify("stitching", "Running global consistency check...", 85)
        final_output, stitch_result = call_collaborator(
            "Stitching",
            collaborators.stitch,
            state["skeleton"],
            state["processed_chunks"],
        )
        return {"final_output": final_output, "contradictions": list(stitch_result.contradictions)}

    workflow = StateGraph(PipelineState)

    workflow.add_node("extract_skeleton", skeleton_node)
    workflow.add_node("chunk_text", chunking_node)
    workflow.add_node("reconstruct_chunk", reconstruct_node)
    workflow.add_node("pace", pace_node)
    workflow.add_node("stitch_chunks", stitch_node)

    workflow.set_entry_point("extract_skeleton")

    workflow.add_edge("extract_skeleton", "chunk_text")
    workflow.add_edge("chunk_text", "reconstruct_chunk")
    workflow.add_conditional_edges(
        "reconstruct_chunk",
        _route_after_reconstruct,
        {
            "pace": "pace",
            "stitch": "stitch_chunks",
        },
    )
    workflow.add_edge("pace", "reconstruct_chunk")
    workflow.add_edge("stitch_chunks", END)

    return workflow.compile()


def initial_state(text: str, custom_instructions: str | None, length_config) -> PipelineState:
    return {
        "text": text,
        "custom_instructions": custom_instructions,
        "length_config": length_config,
        "skeleton": None,
        "chunks": [],
        "chunk_target_words": 0,
        "chunk_index": 0,
        "processed_chunks": [],
        "running_word_count": 0,
        "pacing_waits": 0,
        "final_output": "",
        "contradictions": [],
    }


def recursion_limit_for(text: str) -> int:
    """Step budget for one run: two steps per chunk, chunks never outnumber words.

    The configured ``graph_recursion_limit`` is a floor, not a cap.
    """
    configured = get_config().get("graph_recursion_limit", 1000)
    return max(configured, 2 * max(count_words(text), 1) + 10)


def run_chunk_pipeline(
    text: str,
    custom_instructions: str | None,
    length_config,
    *,
    collaborators: Collaborators,
    reporter: ProgressReporter,
    pacing: PacingPolicy,
    iteration: Iteration,
) -> PipelineState:
    """Run the chunked pipeline to completion and return its final state."""
    graph = build_chunk_pipeline(collaborators, reporter, pacing, iteration)
    return graph.invoke(
        initial_state(text, custom_instructions, length_config),
        config={"recursion_limit": recursion_limit_for(text)},
    )
