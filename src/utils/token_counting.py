"""Token counting utilities for LLM-facing markdown."""

from collections.abc import Callable
from functools import cache

import tiktoken

from src.utils.config import get_token_count_model
from src.utils.logging import get_logger

logger = get_logger(__name__)

TokenCounter = Callable[[str], int]


@cache
def _get_encoding_for_model(model: str) -> tiktoken.Encoding:
    """Get tiktoken encoding for model with safe fallbacks.

    Falls back to a generic encoding when the model is unknown to tiktoken.
    """
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        logger.warning(f"No tiktoken encoding registered for {model}, using cl100k_base")
        return tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str, model: str) -> int:
    encoding = _get_encoding_for_model(model)
    # Comment bodies are user content, special-token text must be counted as plain text
    return len(encoding.encode(text or "", disallowed_special=()))


def count_tokens_safely(text: str | None, model: str | None = None) -> int:
    """Count tokens, reporting 0 instead of raising.

    Token totals are informational, a tokenizer failure must never fail a render.
    """
    if not text:
        return 0

    try:
        return count_tokens(text, model or get_token_count_model())
    except Exception as e:
        logger.warning(f"Failed to count tokens, counting as 0: {e}")
        return 0


def make_safe_counter(counter: TokenCounter) -> TokenCounter:
    """Wrap an arbitrary counter so that failures count as zero tokens."""

    def safe_counter(text: str) -> int:
        try:
            return counter(text)
        except Exception as e:
            logger.warning(f"Token counter failed, counting as 0: {e}")
            return 0

    return safe_counter
