"""Title tokenization and the keyword admission policy.

Everything here is pure: no I/O, no randomness, no module state that
changes after import.  The vocabulary comes from :mod:`keyword_engine.config`.
"""
from __future__ import annotations

import re
from typing import List

from .config import (
    ALWAYS_ALLOW,
    KEY_MAX_LENGTH,
    MIN_TOKEN_LENGTH,
    STOPWORDS,
    TOO_GENERIC,
    WHITELIST,
)

_EMOJI_RE = re.compile(
    "["
    "\U0001F300-\U0001F5FF"
    "\U0001F600-\U0001F64F"
    "\U0001F680-\U0001F6FF"
    "\u2600-\u27BF"
    "]"
)
_SPACE_RE = re.compile(r"\s+")
# Half- and full-width punctuation, brackets and dashes.
_DELIMITER_RE = re.compile(r"[/|\[\]()\-—–_,!?？:：；;、，。／｜【】「」（）\s]+")

_NUMERIC_RE = re.compile(r"^\d+$")
_DATE_UNIT_RE = re.compile(r"^\d+(年|月|日|點|時|分|秒|%|％)")
_SLASH_DATE_RE = re.compile(r"^\d{2,4}/\d{1,2}(/\d{1,2})?$")

_STOPWORDS_FOLDED = frozenset(w.casefold() for w in STOPWORDS)
_GENERIC_FOLDED = frozenset(w.casefold() for w in TOO_GENERIC)
_ALLOW_FOLDED = frozenset(w.casefold() for w in ALWAYS_ALLOW)


def tokenize(fragment: str) -> List[str]:
    """Split a title into candidate tokens.

    >>> tokenize("[情報] 台積電法說會重點整理")
    ['情報', '台積電法說會重點整理']
    """
    if not fragment:
        return []
    text = _EMOJI_RE.sub("", fragment)
    text = _SPACE_RE.sub(" ", text)
    return [piece.strip() for piece in _DELIMITER_RE.split(text) if piece.strip()]


def _is_stopword(token: str) -> bool:
    """Stopword check, raw and with a forum tag's brackets unwrapped.

    :func:`tokenize` already splits on brackets, so the unwrap only matters
    for tokens handed straight to :func:`is_admissible`, e.g. ``"[盤後]"``.
    """
    folded = token.casefold()
    if folded in _STOPWORDS_FOLDED:
        return True
    if folded.startswith("[") and folded.endswith("]"):
        return folded[1:-1] in _STOPWORDS_FOLDED
    return False


def _is_date_shape(token: str) -> bool:
    return bool(_DATE_UNIT_RE.match(token) or _SLASH_DATE_RE.match(token))


def _matches_whitelist(token: str) -> bool:
    if token.casefold() in _ALLOW_FOLDED:
        return True
    # case-sensitive: a folded "ai" would match half the English vocabulary
    return any(entry in token or token in entry for entry in WHITELIST)


def is_admissible(token: str) -> bool:
    """Return True when *token* passes every admission predicate, in order."""
    if not token or len(token) < MIN_TOKEN_LENGTH:
        return False
    if _is_stopword(token):
        return False
    if _NUMERIC_RE.match(token):
        return False
    if _is_date_shape(token):
        return False
    if token.casefold() in _GENERIC_FOLDED:
        return False
    return _matches_whitelist(token)


def normalize_key(token: str) -> str:
    """Dedup key: the token capped at ``KEY_MAX_LENGTH`` code points."""
    return token[:KEY_MAX_LENGTH]


def admitted_tokens(fragment: str) -> List[str]:
    """Tokenize *fragment* and keep only admissible tokens, as dedup keys."""
    return [normalize_key(tok) for tok in tokenize(fragment) if is_admissible(tok)]
