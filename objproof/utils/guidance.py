"""Distilled objection-proofing guidance for injection into rewrite prompts."""

# Imperative rules for LLM consumption. Keep them short; they are appended
# to every rewrite prompt when guidance is enabled.
_GUIDANCE_RULES = """\
- Anticipate the strongest objection to each central claim and answer it in the text, \
not in a footnote or aside.
- Replace sweeping universals ("always", "never", "everyone") with claims scoped to what \
the evidence supports.
- Make implicit premises explicit when an opponent could deny them.
- Distinguish empirical claims from normative ones and support each with the right kind \
of reason.
- Keep definitions stable: a key term must mean the same thing in every paragraph.
- Concede minor points that cannot be defended rather than overstating them.\
"""


def load_guidance() -> str:
    """Return the distilled objection-proofing rules.

    Returns an empty string if guidance is disabled in config
    (set guidance_enabled to false or remove it).
    """
    from objproof.config import get_config

    config = get_config()
    if not config.get("guidance_enabled", False):
        return ""

    return _GUIDANCE_RULES
