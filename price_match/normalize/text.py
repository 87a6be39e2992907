from __future__ import annotations

import re
import unicodedata
from typing import Callable, List, Optional

# Hebrew and Arabic blocks survive normalization alongside ascii letters/digits.
_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")
_NON_WORD_RUN = re.compile(r"[^a-z0-9\u0590-\u05ff\u0600-\u06ff]+")
_ASCII_WORD = re.compile(r"^[a-z]+$")

Singularizer = Callable[[str], str]


def normalize_text(s: Optional[str]) -> str:
    """Lower-case, fold diacritics and collapse punctuation runs to single spaces.

    'Peinture  Intérieure - 10L' -> 'peinture interieure 10l'
    """
    if not s:
        return ""
    s = unicodedata.normalize("NFKD", s.lower())
    s = _COMBINING_MARKS.sub("", s)
    s = _NON_WORD_RUN.sub(" ", s)
    return s.strip()


def tokenize(s: str) -> List[str]:
    return [t for t in s.split(" ") if t]


def sort_tokens(s: str) -> str:
    return " ".join(sorted(tokenize(s)))


def singularize_ascii_words(s: str) -> str:
    """Naive plural stripping for ascii words longer than three letters.

    Returns an empty string when nothing changed, so callers can skip
    adding a duplicate key. Non-ascii tokens are left alone.
    """
    out = []
    for tok in tokenize(s):
        if _ASCII_WORD.match(tok) and len(tok) > 3:
            if tok.endswith("es"):
                tok = tok[:-2]
            elif tok.endswith("s"):
                tok = tok[:-1]
        out.append(tok)
    singular = " ".join(out)
    return singular if singular != s else ""
