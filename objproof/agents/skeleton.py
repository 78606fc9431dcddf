"""Skeleton Agent — extracts the whole-document argument outline.

Required output schema:
{
  "thesis": "string",
  "outline": ["string — one entry per argument step, in document order"],
  "key_terms": ["string"],
  "commitments": ["string — claims every part of the text must stay consistent with"]
}
"""

from objproof.config import get_config
from objproof.models import GlobalSkeleton
from objproof.utils.llm import generate_json

SKELETON_MAX_TOKENS = 4000

SYSTEM_PROMPT = """\
You are the Skeleton agent in an objection-proof rewriting pipeline.

The document you receive will be rewritten in independent chunks. Your outline is the \
only shared reference those chunk rewrites get, so it must capture the argument's \
structure precisely enough that no chunk drifts from it.

You MUST respond with valid JSON matching this exact schema:
{
  "thesis": "string — the central claim of the whole document, one sentence",
  "outline": ["string — each major argument step, in the order it appears"],
  "key_terms": ["string — terms of art whose meaning must stay fixed, with a short gloss"],
  "commitments": ["string — claims the author is committed to that later passages must not contradict"]
}

Rules:
- outline must be non-empty and follow document order.
- Do not evaluate or improve the argument; describe it.
- Respond ONLY with the JSON object. No markdown fences, no commentary.
"""


def _string_list(data: dict, key: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"Skeleton field '{key}' must be a list.")
    return [str(item).strip() for item in value if str(item).strip()]


def _validate_response(data: dict) -> GlobalSkeleton:
    """Validate the Skeleton response and convert it to a GlobalSkeleton."""
    thesis = data.get("thesis")
    if not isinstance(thesis, str) or not thesis.strip():
        raise ValueError("Skeleton response missing 'thesis'.")

    outline = _string_list(data, "outline")
    if not outline:
        raise ValueError("Skeleton response has an empty 'outline'.")

    return GlobalSkeleton(
        thesis=thesis.strip(),
        outline=outline,
        key_terms=_string_list(data, "key_terms"),
        commitments=_string_list(data, "commitments"),
    )


def extract_global_skeleton(text: str, custom_instructions: str | None = None) -> GlobalSkeleton:
    """Ask the configured skeleton model for the document's argument outline."""
    config = get_config()

    prompt = f"## Document\n{text}"
    if custom_instructions:
        prompt += (
            "\n\n## Rewrite Instructions\n"
            "The document will later be rewritten under these instructions; note any "
            f"outline steps they affect.\n{custom_instructions}"
        )

    return generate_json(
        prompt,
        _validate_response,
        name="Skeleton extraction",
        model_id=config["skeleton_model"],
        max_output_tokens=SKELETON_MAX_TOKENS,
        temperature=0,
        system=SYSTEM_PROMPT,
    )


def render_skeleton(skeleton: GlobalSkeleton) -> str:
    """Render a skeleton as the markdown block embedded in downstream prompts."""
    lines = [f"Thesis: {skeleton.thesis}", "", "Outline:"]
    lines += [f"{i}. {step}" for i, step in enumerate(skeleton.outline, 1)]
    if skeleton.key_terms:
        lines += ["", "Key terms:"] + [f"- {term}" for term in skeleton.key_terms]
    if skeleton.commitments:
        lines += ["", "Commitments:"] + [f"- {claim}" for claim in skeleton.commitments]
    return "\n".join(lines)
