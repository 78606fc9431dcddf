"""Rewrite pipeline settings: model ids, chunking, pacing and retry knobs.

``config.yaml`` is read once at import; provider API keys come from ``.env``.
Tests swap ``_config`` for their own dict.
"""

from pathlib import Path

import yaml
from dotenv import load_dotenv

# ANTHROPIC_API_KEY / GOOGLE_API_KEY live in the checkout's .env
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

_config = yaml.safe_load(CONFIG_PATH.read_text())


def get_config() -> dict:
    """Return the pipeline settings (model ids, thresholds, pacing, retries)."""
    return _config
