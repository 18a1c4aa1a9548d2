# offloading/core/scoring.py
"""
Response scoring: normalization, Levenshtein distance and a bounded similarity.

Every caller (result endpoint, sample-data and rescoring scripts) goes through
`score_response`, so stored scores can be reproduced from the raw responses.
"""
from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Optional, Tuple

from loguru import logger

DEFAULT_LOCALE = "en"

_WS_RUN = re.compile(r"\s+")

_COMBINING_DOT_ABOVE = "\u0307"

# Lithuanian: precomposed capitals that lowercase to i + dot above + accent
_LT_ACCENTED_I = {
    "\u00cc": "i\u0307\u0300",  # I with grave
    "\u00cd": "i\u0307\u0301",  # I with acute
    "\u0128": "i\u0307\u0303",  # I with tilde
}
_LT_SOFT_DOTTED = {"I": "i", "J": "j", "\u012e": "\u012f"}


@dataclass(frozen=True)
class ScoringResult:
    normalized_response: str
    normalized_correct: str
    edit_distance: int
    similarity: float


def _language(locale: Optional[str]) -> str:
    tag = (locale or DEFAULT_LOCALE).strip().replace("_", "-").lower()
    return tag.split("-", 1)[0] or DEFAULT_LOCALE


def _more_above(text: str, i: int) -> bool:
    """True when a combining mark of class 230 follows position i (Unicode More_Above)."""
    for ch in text[i + 1:]:
        ccc = unicodedata.combining(ch)
        if ccc == 0:
            return False
        if ccc == 230:
            return True
    return False


def _fold_turkic(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\u0130":  # capital I with dot above
            out.append("i")
        elif ch == "I":
            if text[i + 1:i + 2] == _COMBINING_DOT_ABOVE:
                out.append("i")
                i += 1
            else:
                out.append("\u0131")  # dotless i
        else:
            out.append(ch.lower())
        i += 1
    return "".join(out)


def _fold_lithuanian(text: str) -> str:
    out = []
    for i, ch in enumerate(text):
        if ch in _LT_ACCENTED_I:
            out.append(_LT_ACCENTED_I[ch])
        elif ch in _LT_SOFT_DOTTED and _more_above(text, i):
            out.append(_LT_SOFT_DOTTED[ch] + _COMBINING_DOT_ABOVE)
        else:
            out.append(ch.lower())
    return "".join(out)


def fold_case(text: str, locale: Optional[str] = None) -> str:
    """Lowercase `text` following the casing rules of `locale`.

    Turkish/Azerbaijani dotted and dotless I and the Lithuanian dot-retention
    rules come from Unicode SpecialCasing; every other language uses the
    default Unicode lowercase mapping.
    """
    lang = _language(locale)
    if lang in ("tr", "az"):
        return _fold_turkic(text)
    if lang == "lt":
        return _fold_lithuanian(text)
    return text.lower()


def normalize(text: Optional[str], locale: Optional[str] = None) -> str:
    """NFKC, locale-aware lowercase, trim, collapse whitespace. Empty/absent -> ''."""
    if not text:
        return ""
    try:
        if not isinstance(text, str):
            text = str(text)
        # lone surrogates and the like
        text.encode("utf-8")
        s = unicodedata.normalize("NFKC", text)
        s = fold_case(s, locale).strip()
        return _WS_RUN.sub(" ", s)
    except (TypeError, ValueError, UnicodeError) as e:
        logger.warning("normalize fell back to empty string: {!r}", e)
        return ""


def cap_for_scoring(text: Optional[str], limit: int) -> Tuple[Optional[str], bool]:
    """First `limit` characters of `text` and whether anything was cut; limit <= 0 disables the cap."""
    if text is not None and limit > 0 and len(text) > limit:
        return text[:limit], True
    return text, False


def utf8_safe(text: Optional[str]) -> Optional[str]:
    """`text` with unencodable code points replaced, fit for storage and JSON."""
    if text is None:
        return None
    return text.encode("utf-8", "replace").decode("utf-8")


def edit_distance(a: Optional[str], b: Optional[str]) -> int:
    """Levenshtein distance (insert/delete/substitute, each cost 1) over code points."""
    a = a or ""
    b = b or ""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    # keep the DP row over the shorter string
    if len(a) < len(b):
        a, b = b, a
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a):
        curr = [i + 1]
        for j, cb in enumerate(b):
            cost = 0 if ca == cb else 1
            curr.append(min(curr[j] + 1, prev[j + 1] + 1, prev[j] + cost))
        prev = curr
    return prev[-1]


def score(distance: int, len_correct: int, len_response: int) -> float:
    """1 - distance / max(1, longest), clamped to [0, 1]. Two empty strings score 1.0."""
    denom = max(1, max(len_correct, len_response))
    raw = 1 - (distance / denom)
    return max(0.0, min(1.0, raw))


def score_response(
    response: Optional[str],
    correct: Optional[str],
    locale: Optional[str] = None,
) -> ScoringResult:
    norm_response = normalize(response, locale)
    norm_correct = normalize(correct, locale)
    dist = edit_distance(norm_response, norm_correct)
    return ScoringResult(
        normalized_response=norm_response,
        normalized_correct=norm_correct,
        edit_distance=dist,
        similarity=score(dist, len(norm_correct), len(norm_response)),
    )
