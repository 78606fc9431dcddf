"""Integration tests: the LLM-backed agents with mocked chat models."""

import json
from unittest.mock import patch, MagicMock

import pytest

from objproof.agents.reconstructor import reconstruct_chunk_constrained
from objproof.agents.reconstructor import _validate_response as validate_reconstruction
from objproof.agents.short_text import process_short_text
from objproof.agents.skeleton import extract_global_skeleton, render_skeleton
from objproof.agents.skeleton import _validate_response as validate_skeleton
from objproof.agents.stitcher import stitch_and_validate
from objproof.agents.stitcher import _validate_response as validate_stitch
from objproof.errors import CollaboratorError
from objproof.length import calculate_length_config
from objproof.models import ChunkDelta, ProcessedChunk


def _mock_llm_response(content):
    """Create a mock LLM response object."""
    response = MagicMock()
    response.content = content
    return response


def _prompt_of(MockLLM) -> str:
    messages = MockLLM.return_value.invoke.call_args[0][0]
    return messages[-1]["content"]


# --- short-text rewriter ---

class TestShortText:
    @patch("objproof.utils.llm.ChatAnthropic")
    def test_one_call_trimmed(self, MockLLM, mock_config):
        MockLLM.return_value.invoke.return_value = _mock_llm_response("\n  Better text.  \n")

        result = process_short_text("Some text.", 120)

        assert result == "Better text."
        assert MockLLM.return_value.invoke.call_count == 1
        MockLLM.assert_called_once_with(model="claude-test", temperature=0.3, max_tokens=8000)

    @patch("objproof.utils.llm.ChatAnthropic")
    def test_prompt_contents(self, MockLLM, mock_config):
        MockLLM.return_value.invoke.return_value = _mock_llm_response("x")

        process_short_text("Original argument.", 120, "Use British spelling.")

        prompt = _prompt_of(MockLLM)
        assert "Original argument." in prompt
        assert "approximately 120 words" in prompt
        assert "CUSTOM INSTRUCTIONS:\nUse British spelling." in prompt
        assert "within 10%" in prompt
        assert "GUIDELINES" not in prompt

    @patch("objproof.utils.llm.ChatAnthropic")
    def test_guidance_included_when_enabled(self, MockLLM, mock_config):
        mock_config["guidance_enabled"] = True
        MockLLM.return_value.invoke.return_value = _mock_llm_response("x")

        process_short_text("Original argument.", 120)

        assert "OBJECTION-PROOFING GUIDELINES" in _prompt_of(MockLLM)

    @patch("objproof.utils.llm.ChatAnthropic")
    def test_non_text_block_degrades_to_empty(self, MockLLM, mock_config):
        MockLLM.return_value.invoke.return_value = _mock_llm_response([{"type": "tool_use", "id": "t1"}])

        assert process_short_text("Some text.", 120) == ""


# --- skeleton ---

class TestSkeleton:
    def test_validate_normalises(self):
        skeleton = validate_skeleton({
            "thesis": "  X is true. ",
            "outline": ["step one", " ", "step two"],
        })
        assert skeleton.thesis == "X is true."
        assert skeleton.outline == ["step one", "step two"]
        assert skeleton.key_terms == []
        assert skeleton.commitments == []

    def test_validate_missing_thesis(self):
        with pytest.raises(ValueError, match="thesis"):
            validate_skeleton({"outline": ["a"]})

    def test_validate_empty_outline(self):
        with pytest.raises(ValueError, match="outline"):
            validate_skeleton({"thesis": "t", "outline": []})

    def test_validate_outline_not_list(self):
        with pytest.raises(ValueError, match="must be a list"):
            validate_skeleton({"thesis": "t", "outline": "a then b"})

    @patch("objproof.utils.llm.ChatAnthropic")
    def test_extracts_skeleton(self, MockLLM, mock_config):
        payload = {"thesis": "T", "outline": ["a", "b"], "key_terms": ["k"], "commitments": ["c"]}
        MockLLM.return_value.invoke.return_value = _mock_llm_response(json.dumps(payload))

        skeleton = extract_global_skeleton("The document.", "Be formal.")

        assert skeleton.thesis == "T"
        assert skeleton.outline == ["a", "b"]
        prompt = _prompt_of(MockLLM)
        assert "The document." in prompt
        assert "Be formal." in prompt
        MockLLM.assert_called_once_with(model="claude-test", temperature=0, max_tokens=4000)

    @patch("objproof.utils.llm.ChatAnthropic")
    def test_retry_on_bad_first_response(self, MockLLM, mock_config):
        good = json.dumps({"thesis": "T", "outline": ["a"]})
        MockLLM.return_value.invoke.side_effect = [
            _mock_llm_response("not json at all"),
            _mock_llm_response(good),
        ]

        skeleton = extract_global_skeleton("The document.")

        assert MockLLM.return_value.invoke.call_count == 2
        assert skeleton.thesis == "T"

    @patch("objproof.utils.llm.ChatAnthropic")
    def test_raises_after_two_failures(self, MockLLM, mock_config):
        MockLLM.return_value.invoke.return_value = _mock_llm_response("not json")

        with pytest.raises(CollaboratorError):
            extract_global_skeleton("The document.")

    def test_render(self, skeleton):
        rendered = render_skeleton(skeleton)
        assert rendered.startswith("Thesis: Remote work raises productivity.")
        assert "1. Define productivity" in rendered
        assert "3. Answer objections" in rendered
        assert "- productivity: output per paid hour" in rendered


# --- reconstructor ---

class TestReconstructor:
    def test_validate_builds_delta(self):
        result = validate_reconstruction(
            {"rewritten_text": " New text. ", "delta": {"claims_added": ["c1"], "notes": None}},
            index=4,
        )
        assert result.output_text == "New text."
        assert result.delta == ChunkDelta(index=4, claims_added=["c1"])

    def test_validate_missing_text(self):
        with pytest.raises(ValueError, match="rewritten_text"):
            validate_reconstruction({"delta": {}}, index=0)

    def test_validate_bad_delta(self):
        with pytest.raises(ValueError, match="delta"):
            validate_reconstruction({"rewritten_text": "x", "delta": "none"}, index=0)

    @patch("objproof.utils.llm.ChatAnthropic")
    def test_reconstructs_chunk(self, MockLLM, mock_config, skeleton):
        payload = {
            "rewritten_text": "Stronger chunk.",
            "delta": {"claims_added": [], "claims_removed": ["weak claim"], "terms_used": [], "notes": ""},
        }
        MockLLM.return_value.invoke.return_value = _mock_llm_response(json.dumps(payload))
        length_config = calculate_length_config(5000, 2700, 3300)

        result = reconstruct_chunk_constrained("Old chunk.", 2, 7, skeleton, 429, length_config)

        assert result.output_text == "Stronger chunk."
        assert result.delta.index == 2
        assert result.delta.claims_removed == ["weak claim"]

        prompt = _prompt_of(MockLLM)
        assert "Chunk 3 of 7." in prompt
        assert "approximately 429 words" in prompt
        assert "between 2700 and 3300 words" in prompt
        assert "Tighten" in prompt
        assert "Old chunk." in prompt
        assert "Remote work raises productivity." in prompt


# --- stitcher ---

class TestStitcher:
    def _chunks(self, n):
        return [ProcessedChunk(text=f" Part {i}. ", delta=ChunkDelta(index=i)) for i in range(n)]

    def test_validate_normalises_chunks(self):
        result = validate_stitch({"contradictions": [{"chunks": "2", "description": "d"}]})
        assert result.contradictions == [{"chunks": [2], "description": "d"}]

    def test_validate_missing_field(self):
        with pytest.raises(ValueError, match="contradictions"):
            validate_stitch({})

    def test_validate_missing_description(self):
        with pytest.raises(ValueError, match="description"):
            validate_stitch({"contradictions": [{"chunks": [1]}]})

    @patch("objproof.utils.llm.ChatAnthropic")
    def test_single_chunk_skips_check(self, MockLLM, mock_config, skeleton):
        final_output, result = stitch_and_validate(skeleton, self._chunks(1))

        assert final_output == "Part 0."
        assert result.contradictions == []
        MockLLM.assert_not_called()

    @patch("objproof.utils.llm.ChatAnthropic")
    def test_joins_in_order_and_reports(self, MockLLM, mock_config, skeleton):
        payload = {"contradictions": [{"chunks": [0, 2], "description": "Conflicting definitions."}]}
        MockLLM.return_value.invoke.return_value = _mock_llm_response(json.dumps(payload))

        final_output, result = stitch_and_validate(skeleton, self._chunks(3))

        assert final_output == "Part 0.\n\nPart 1.\n\nPart 2."
        assert result.contradictions == [{"chunks": [0, 2], "description": "Conflicting definitions."}]
        prompt = _prompt_of(MockLLM)
        assert "## Chunk 0" in prompt
        assert "## Chunk 2" in prompt

    @patch("objproof.utils.llm.ChatAnthropic")
    def test_consistent_chunks(self, MockLLM, mock_config, skeleton):
        MockLLM.return_value.invoke.return_value = _mock_llm_response('{"contradictions": []}')

        _, result = stitch_and_validate(skeleton, self._chunks(2))

        assert result.contradictions == []
