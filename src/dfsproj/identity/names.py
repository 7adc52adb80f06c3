"""Player-name canonicalization and similarity scoring."""

from __future__ import annotations

import re
import unicodedata
from typing import Dict, Mapping, Sequence

from rapidfuzz.distance import Levenshtein


_NAME_SUFFIX_TOKENS = {"jr", "sr", "ii", "iii", "iv"}
_PUNCTUATION_PATTERN = re.compile(r"""[.,\-'()/#!$%^&*;:{}=_`~"]""")

NICKNAME_GROUPS: Mapping[str, Sequence[str]] = {
    "william": ("bill", "billy", "will"),
    "robert": ("rob", "bob", "bobby"),
    "richard": ("rich", "rick", "dick", "ricky"),
    "michael": ("mike", "mikey"),
    "james": ("jim", "jimmy", "jamie"),
    "joseph": ("joe", "joey"),
    "christopher": ("chris",),
    "nicholas": ("nick",),
    "daniel": ("dan", "danny"),
    "anthony": ("tony",),
    "joshua": ("josh",),
    "matthew": ("matt",),
    "thomas": ("tom", "tommy"),
    "edward": ("ed", "eddie"),
    "zachary": ("zach", "zack"),
}


def _build_nickname_lookup() -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for standard, variants in NICKNAME_GROUPS.items():
        for variant in variants:
            lookup.setdefault(variant, standard)
    return lookup


NICKNAME_LOOKUP = _build_nickname_lookup()


def _fold_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _is_suffix(token: str) -> bool:
    return _PUNCTUATION_PATTERN.sub("", token).strip() in _NAME_SUFFIX_TOKENS


def _reorder_last_first(value: str) -> str:
    parts = [part.strip() for part in value.split(",")]
    suffixes = [part for part in parts if _is_suffix(part)]
    parts = [part for part in parts if part and not _is_suffix(part)]
    if not parts:
        return " ".join(suffixes)
    return " ".join(parts[1:] + parts[:1] + suffixes)


def normalize_name(raw: object) -> str:
    """Canonicalize a free-text player name into a comparable form.

    ``"Griffey Jr., Ken"``, ``"Ken Griffey Jr."`` and ``"ken griffey"`` all
    normalize to ``"ken griffey"``; ``"Smith, Billy"`` and ``"Bill Smith"``
    both become ``"william smith"``. Never raises: anything that is not a
    string normalizes to ``""``.
    """

    if not isinstance(raw, str) or not raw:
        return ""

    # Lowercasing can reintroduce combining marks (e.g. dotted capital I).
    lowered = _fold_accents(_fold_accents(raw).lower())
    if "," in lowered:
        lowered = _reorder_last_first(lowered)

    tokens = _PUNCTUATION_PATTERN.sub("", lowered).split()

    while len(tokens) > 1 and tokens[-1] in _NAME_SUFFIX_TOKENS:
        tokens.pop()

    return " ".join(NICKNAME_LOOKUP.get(token, token) for token in tokens)


def normalized_similarity(left: str, right: str) -> float:
    """Similarity between two already-normalized names."""

    if left == right:
        return 1.0
    distance = Levenshtein.distance(left, right)
    return 1.0 - distance / max(len(left), len(right))


def name_similarity(a: object, b: object) -> float:
    """Return a 0-1 similarity between two raw names (1.0 when they normalize identically)."""

    return normalized_similarity(normalize_name(a), normalize_name(b))
