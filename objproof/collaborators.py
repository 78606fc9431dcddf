"""Injectable collaborators consumed by the rewrite orchestrator."""

from dataclasses import dataclass
from typing import Callable

from objproof.agents.reconstructor import reconstruct_chunk_constrained
from objproof.agents.short_text import process_short_text
from objproof.agents.skeleton import extract_global_skeleton
from objproof.agents.stitcher import stitch_and_validate
from objproof.chunking import smart_chunk
from objproof.length import calculate_length_config, parse_target_length
from objproof.models import (
    Chunk,
    ChunkResult,
    GlobalSkeleton,
    LengthConfig,
    ProcessedChunk,
    StitchResult,
    TargetWindow,
)


@dataclass
class Collaborators:
    """The steps the orchestrator delegates to, defaulting to the built-in ones."""

    extract_skeleton: Callable[[str, str | None], GlobalSkeleton] = extract_global_skeleton
    chunk: Callable[[str], list[Chunk]] = smart_chunk
    reconstruct: Callable[
        [str, int, int, GlobalSkeleton, int, LengthConfig], ChunkResult
    ] = reconstruct_chunk_constrained
    stitch: Callable[
        [GlobalSkeleton, list[ProcessedChunk]], tuple[str, StitchResult]
    ] = stitch_and_validate
    parse_target_length: Callable[[str | None], TargetWindow | None] = parse_target_length
    calculate_length_config: Callable[
        [int, int | None, int | None, str | None], LengthConfig
    ] = calculate_length_config
    rewrite_short_text: Callable[[str, int, str | None], str] = process_short_text
