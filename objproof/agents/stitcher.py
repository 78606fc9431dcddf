"""Stitcher Agent — joins rewritten chunks and checks them for cross-chunk contradictions.

Required output schema:
{
  "contradictions": [
    {"chunks": [int, ...], "description": "string"}
  ]
}

Contradictions are reported, never repaired.
"""

import json

from objproof.agents.skeleton import render_skeleton
from objproof.config import get_config
from objproof.models import GlobalSkeleton, ProcessedChunk, StitchResult
from objproof.utils.llm import generate_json

STITCH_MAX_TOKENS = 4000

# Characters of each chunk shown to the consistency check alongside its delta.
EXCERPT_CHARS = 1500

SYSTEM_PROMPT = """\
You are the Stitcher agent in an objection-proof rewriting pipeline.

A document was rewritten chunk by chunk against a shared skeleton. You receive the \
skeleton, and for each chunk a record of the claims it added or removed plus an excerpt. \
Find places where two chunks now contradict each other, or where a chunk contradicts the \
skeleton's thesis or commitments.

You MUST respond with valid JSON matching this exact schema:
{
  "contradictions": [
    {"chunks": [0, 3], "description": "string — what conflicts and why"}
  ]
}

Rules:
- Chunk numbers are 0-indexed, as given in the input.
- Report only genuine logical conflicts, not differences in emphasis or style.
- An empty list means the chunks are mutually consistent.
- Respond ONLY with the JSON object. No markdown fences, no commentary.
"""


def _validate_response(data: dict) -> StitchResult:
    """Validate the Stitcher response and normalise each contradiction."""
    if "contradictions" not in data:
        raise ValueError("Stitcher response missing 'contradictions' field.")
    if not isinstance(data["contradictions"], list):
        raise ValueError("Stitcher 'contradictions' must be a list.")

    contradictions = []
    for i, item in enumerate(data["contradictions"]):
        if not isinstance(item, dict) or not item.get("description"):
            raise ValueError(f"Contradiction {i} missing 'description'.")
        chunks = item.get("chunks", [])
        if not isinstance(chunks, list):
            chunks = [chunks]
        try:
            chunks = [int(c) for c in chunks]
        except (TypeError, ValueError):
            raise ValueError(f"Contradiction {i} has non-integer chunk references.")
        contradictions.append({"chunks": chunks, "description": str(item["description"])})

    return StitchResult(contradictions=contradictions)


def _build_user_prompt(skeleton: GlobalSkeleton, processed_chunks: list[ProcessedChunk]) -> str:
    parts = [f"## Document Skeleton\n{render_skeleton(skeleton)}"]
    for i, chunk in enumerate(processed_chunks):
        delta = {
            "claims_added": chunk.delta.claims_added,
            "claims_removed": chunk.delta.claims_removed,
            "terms_used": chunk.delta.terms_used,
            "notes": chunk.delta.notes,
        }
        parts.append(
            f"## Chunk {i}\n```json\n{json.dumps(delta, indent=2)}\n```\n"
            f"Excerpt:\n{chunk.text[:EXCERPT_CHARS]}"
        )
    return "\n\n".join(parts)


def stitch_and_validate(
    skeleton: GlobalSkeleton, processed_chunks: list[ProcessedChunk]
) -> tuple[str, StitchResult]:
    """Join the chunks in order and list any contradictions between them.

    A single chunk has nothing to contradict, so the model is not called.
    """
    final_output = "\n\n".join(chunk.text.strip() for chunk in processed_chunks)
    if len(processed_chunks) < 2:
        return final_output, StitchResult()

    config = get_config()
    stitch_result = generate_json(
        _build_user_prompt(skeleton, processed_chunks),
        _validate_response,
        name="Consistency check",
        model_id=config["stitch_model"],
        max_output_tokens=STITCH_MAX_TOKENS,
        temperature=0,
        system=SYSTEM_PROMPT,
    )
    return final_output, stitch_result
