"""Reconstructor Agent — rewrites one chunk under the skeleton and its word budget.

Required output schema:
{
  "rewritten_text": "string",
  "delta": {
    "claims_added": ["string"],
    "claims_removed": ["string"],
    "terms_used": ["string"],
    "notes": "string"
  }
}
"""

from objproof.agents.skeleton import render_skeleton
from objproof.config import get_config
from objproof.models import ChunkDelta, ChunkResult, GlobalSkeleton, LengthConfig
from objproof.utils.guidance import load_guidance
from objproof.utils.llm import generate_json

RECONSTRUCT_TEMPERATURE = 0.3

_MODE_DIRECTIONS = {
    "heavy_compression": "Cut aggressively: keep only the load-bearing claims and their best support.",
    "moderate_compression": "Tighten: remove repetition and weaker examples.",
    "maintain": "Keep roughly the original length.",
    "moderate_expansion": "Expand: add support, qualifications and answers to likely objections.",
    "heavy_expansion": "Expand substantially: develop each claim with evidence and rebuttals.",
}

SYSTEM_PROMPT = """\
You are the Reconstructor agent in an objection-proof rewriting pipeline.

You rewrite ONE chunk of a longer document so that it is harder to object to, while \
staying consistent with the document skeleton you are given. Other chunks are rewritten \
separately against the same skeleton, so never introduce claims that contradict the \
skeleton's thesis or commitments, and never redefine its key terms.

You MUST respond with valid JSON matching this exact schema:
{
  "rewritten_text": "string — the rewritten chunk, prose only",
  "delta": {
    "claims_added": ["string — claims present in your rewrite but not in the source chunk"],
    "claims_removed": ["string — source claims you dropped or weakened"],
    "terms_used": ["string — skeleton key terms your rewrite relies on"],
    "notes": "string — anything the stitching step should know, or empty"
  }
}

Respond ONLY with the JSON object. No markdown fences, no commentary.
"""


def _string_list(data: dict, key: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"Delta field '{key}' must be a list.")
    return [str(item) for item in value]


def _validate_response(data: dict, index: int) -> ChunkResult:
    """Validate the Reconstructor response and convert it to a ChunkResult."""
    text = data.get("rewritten_text")
    if not isinstance(text, str) or not text.strip():
        raise ValueError("Reconstructor response missing 'rewritten_text'.")

    delta = data.get("delta", {})
    if not isinstance(delta, dict):
        raise ValueError("Reconstructor 'delta' must be an object.")

    return ChunkResult(
        output_text=text.strip(),
        delta=ChunkDelta(
            index=index,
            claims_added=_string_list(delta, "claims_added"),
            claims_removed=_string_list(delta, "claims_removed"),
            terms_used=_string_list(delta, "terms_used"),
            notes=str(delta.get("notes") or ""),
        ),
    )


def _build_user_prompt(
    chunk_text: str,
    index: int,
    total_chunks: int,
    skeleton: GlobalSkeleton,
    chunk_target_words: int,
    length_config: LengthConfig,
) -> str:
    parts = [
        f"## Document Skeleton\n{render_skeleton(skeleton)}",
        f"## Position\nChunk {index + 1} of {total_chunks}.",
        (
            "## Length\n"
            f"Target for this chunk: approximately {chunk_target_words} words. "
            f"The whole document should land between {length_config.target_min} and "
            f"{length_config.target_max} words. "
            f"{_MODE_DIRECTIONS[length_config.length_mode]}"
        ),
    ]
    guidance = load_guidance()
    if guidance:
        parts.append(f"## Objection-Proofing Guidelines\n{guidance}")
    parts.append(f"## Chunk To Rewrite\n{chunk_text}")
    return "\n\n".join(parts)


def reconstruct_chunk_constrained(
    chunk_text: str,
    index: int,
    total_chunks: int,
    skeleton: GlobalSkeleton,
    chunk_target_words: int,
    length_config: LengthConfig,
) -> ChunkResult:
    """Rewrite one chunk and report how its content moved."""
    config = get_config()
    prompt = _build_user_prompt(
        chunk_text, index, total_chunks, skeleton, chunk_target_words, length_config
    )
    return generate_json(
        prompt,
        lambda data: _validate_response(data, index),
        name=f"Chunk {index + 1} reconstruction",
        model_id=config["reconstruct_model"],
        # Room for the rewritten prose plus the delta.
        max_output_tokens=min(16000, max(2000, chunk_target_words * 3)),
        temperature=RECONSTRUCT_TEMPERATURE,
        system=SYSTEM_PROMPT,
    )
