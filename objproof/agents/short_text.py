"""Short-Text Rewriter — single-pass rewrite for inputs below the chunking threshold."""

from objproof.config import get_config
from objproof.utils.guidance import load_guidance
from objproof.utils.llm import generate_text

SHORT_TEXT_TEMPERATURE = 0.3
SHORT_TEXT_MAX_TOKENS = 8000


def _build_prompt(text: str, target_words: int, custom_instructions: str | None) -> str:
    parts = [
        "You are rewriting text to make it stronger against objections while maintaining coherence.",
        f"INPUT TEXT:\n{text}",
        f"TARGET WORD COUNT: approximately {target_words} words",
    ]
    if custom_instructions:
        parts.append(f"CUSTOM INSTRUCTIONS:\n{custom_instructions}")

    parts.append(
        "REWRITE REQUIREMENTS:\n"
        "1. Maintain the original argument's structure and flow\n"
        "2. Strengthen weak points that could be challenged\n"
        "3. Add necessary qualifications and evidence\n"
        "4. Preserve key terminology and concepts\n"
        "5. Ensure logical coherence throughout\n"
        "6. Hit the target word count (within 10%)"
    )

    guidance = load_guidance()
    if guidance:
        parts.append(f"OBJECTION-PROOFING GUIDELINES:\n{guidance}")

    parts.append("OUTPUT: Provide ONLY the rewritten text, no meta-commentary or explanations.")
    return "\n\n".join(parts)


def process_short_text(text: str, target_words: int, custom_instructions: str | None = None) -> str:
    """Rewrite ``text`` in one generation call and return the trimmed result."""
    config = get_config()
    output = generate_text(
        _build_prompt(text, target_words, custom_instructions),
        model_id=config["rewrite_model"],
        max_output_tokens=SHORT_TEXT_MAX_TOKENS,
        temperature=SHORT_TEXT_TEMPERATURE,
    )
    return output.strip()
