"""Cross-source player identity resolution."""

from .names import NICKNAME_GROUPS, name_similarity, normalize_name, normalized_similarity
from .registry import IdentityRegistry, IdentityStore, synthetic_provisional_id
from .resolver import MatchStage, PlayerResolver, Resolution, ResolutionReport

__all__ = [
    "IdentityRegistry",
    "IdentityStore",
    "MatchStage",
    "NICKNAME_GROUPS",
    "PlayerResolver",
    "Resolution",
    "ResolutionReport",
    "name_similarity",
    "normalize_name",
    "normalized_similarity",
    "synthetic_provisional_id",
]
