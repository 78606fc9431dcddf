"""Shared fixtures for the objproof test suite."""

from unittest.mock import MagicMock, patch

import pytest

from objproof.collaborators import Collaborators
from objproof.graph import PacingPolicy
from objproof.models import Chunk, ChunkDelta, ChunkResult, GlobalSkeleton, StitchResult
from objproof.pipeline import RecursiveRewriter
from objproof.store import IterationStore

TEST_CONFIG = {
    "rewrite_model": "claude-test",
    "skeleton_model": "claude-test",
    "reconstruct_model": "claude-test",
    "stitch_model": "claude-test",
    "short_text_threshold": 1500,
    "target_chunk_words": 800,
    "chunk_pacing_seconds": 1.5,
    "graph_recursion_limit": 1000,
    "llm_max_retries": 0,
    "guidance_enabled": False,
}


@pytest.fixture
def mock_config():
    """Patch the config singleton with test-friendly values."""
    test_config = dict(TEST_CONFIG)
    with patch("objproof.config._config", test_config):
        yield test_config


@pytest.fixture
def make_text():
    """Return a builder for n-word texts split into 100-word paragraphs."""

    def _make(n: int) -> str:
        words = [f"word{i}" for i in range(n)]
        return "\n\n".join(" ".join(words[i:i + 100]) for i in range(0, n, 100))

    return _make


@pytest.fixture
def skeleton():
    return GlobalSkeleton(
        thesis="Remote work raises productivity.",
        outline=["Define productivity", "Present evidence", "Answer objections"],
        key_terms=["productivity: output per paid hour"],
        commitments=["Productivity is measured per hour, not per day."],
    )


@pytest.fixture
def sleeps():
    """Recording stand-in for time.sleep."""
    return []


@pytest.fixture
def pacing(sleeps):
    return PacingPolicy(delay_seconds=1.5, sleep=sleeps.append)


def _fake_chunks(n: int) -> list[Chunk]:
    return [Chunk(index=i, text=f"source chunk {i}", word_count=3) for i in range(n)]


def _fake_reconstruct(chunk_text, index, total_chunks, skeleton, chunk_target_words, length_config):
    return ChunkResult(output_text=f"rewritten chunk {index}", delta=ChunkDelta(index=index))


def _fake_stitch(skeleton, processed_chunks):
    return "\n\n".join(c.text for c in processed_chunks), StitchResult()


@pytest.fixture
def fake_collaborators(skeleton):
    """Collaborators with every LLM-backed step replaced by a recording fake.

    Length parsing and configuration stay real. The chunker returns seven
    chunks unless a test reassigns ``chunk.return_value``.
    """
    return Collaborators(
        extract_skeleton=MagicMock(return_value=skeleton),
        chunk=MagicMock(return_value=_fake_chunks(7)),
        reconstruct=MagicMock(side_effect=_fake_reconstruct),
        stitch=MagicMock(side_effect=_fake_stitch),
        rewrite_short_text=MagicMock(return_value="Rewritten short text."),
    )


@pytest.fixture
def fake_chunks():
    return _fake_chunks


@pytest.fixture
def rewriter(mock_config, fake_collaborators, pacing):
    return RecursiveRewriter(store=IterationStore(), collaborators=fake_collaborators, pacing=pacing)
