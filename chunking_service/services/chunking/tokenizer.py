"""
Tokenizers used by token-based chunking. Each tokenizer maps text to an ordered list
of token strings; chunking only needs the strings, not offsets.

Built-in: standard, whitespace, letter, keyword, and tiktoken encodings.
"""

import re
from functools import lru_cache
from typing import Callable

import tiktoken

from chunking_service.config.logging import get_logger
from chunking_service.services.chunking.errors import TokenizationError

logger = get_logger(__name__)

# Longest token the standard tokenizer emits; longer runs are split
STANDARD_MAX_TOKEN_LENGTH = 255

# Word runs, joined across a single inner ' or . between word characters (can't, U.S.A, 3.14)
_STANDARD_PATTERN = re.compile(r"\w+(?:['’.]\w+)*")
_WHITESPACE_PATTERN = re.compile(r"\S+")
_LETTER_PATTERN = re.compile(r"[^\W\d_]+")

# Tokenizer name -> tiktoken encoding name. "tiktoken" is the OpenAI default encoding.
TIKTOKEN_ENCODINGS = {
    "tiktoken": "cl100k_base",
    "cl100k_base": "cl100k_base",
    "o200k_base": "o200k_base",
    "p50k_base": "p50k_base",
    "r50k_base": "r50k_base",
}


def _standard_tokens(text: str) -> list[str]:
    tokens: list[str] = []
    for m in _STANDARD_PATTERN.finditer(text):
        term = m.group()
        for i in range(0, len(term), STANDARD_MAX_TOKEN_LENGTH):
            tokens.append(term[i : i + STANDARD_MAX_TOKEN_LENGTH])
    return tokens


def _whitespace_tokens(text: str) -> list[str]:
    return _WHITESPACE_PATTERN.findall(text)


def _letter_tokens(text: str) -> list[str]:
    return _LETTER_PATTERN.findall(text)


def _keyword_tokens(text: str) -> list[str]:
    return [text] if text else []


@lru_cache(maxsize=None)
def _get_tiktoken_encoding(encoding_name: str) -> tiktoken.Encoding:
    """Load a tiktoken encoding once per process."""
    encoding = tiktoken.get_encoding(encoding_name)
    logger.info("tiktoken encoding loaded", extra={"encoding": encoding_name})
    return encoding


def _tiktoken_tokens(text: str, encoding_name: str) -> list[str]:
    enc = _get_tiktoken_encoding(encoding_name)
    return [enc.decode([t]) for t in enc.encode(text)]


TOKENIZER_REGISTRY: dict[str, Callable[[str], list[str]]] = {
    "standard": _standard_tokens,
    "whitespace": _whitespace_tokens,
    "letter": _letter_tokens,
    "keyword": _keyword_tokens,
}


def supported_tokenizers() -> list[str]:
    """Names accepted by tokenize(), sorted."""
    return sorted([*TOKENIZER_REGISTRY, *TIKTOKEN_ENCODINGS])


def tokenize(text: str, tokenizer_name: str, max_token_count: int) -> list[str]:
    """
    Return the ordered token strings for text.

    Raises TokenizationError when the tokenizer is unknown, fails, or produces more than
    max_token_count tokens.
    """
    if not text:
        return []
    if tokenizer_name in TOKENIZER_REGISTRY:
        tokens = TOKENIZER_REGISTRY[tokenizer_name](text)
    elif tokenizer_name in TIKTOKEN_ENCODINGS:
        try:
            tokens = _tiktoken_tokens(text, TIKTOKEN_ENCODINGS[tokenizer_name])
        except Exception as e:
            raise TokenizationError(
                f"Tokenizer [{tokenizer_name}] failed: {e}", cause=e
            ) from e
    else:
        raise TokenizationError(
            f"Tokenizer [{tokenizer_name}] is not supported. Supported tokenizers are {supported_tokenizers()}"
        )
    if len(tokens) > max_token_count:
        raise TokenizationError(
            f"The number of tokens produced by tokenizer [{tokenizer_name}] has exceeded the allowed maximum "
            f"of [{max_token_count}]. This limit can be set by changing the [index.analyze.max_token_count] "
            "index level setting."
        )
    return tokens
