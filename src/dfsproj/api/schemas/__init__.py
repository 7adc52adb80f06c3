"""Pydantic models for API I/O."""

from .identity import (
    FuzzyMatchResponse,
    IdentityResponse,
    RegistryResponse,
    ResolutionPreviewResponse,
    ResolvedNameResponse,
    ResolveRequest,
    ResolveResponse,
)
from .projection import (
    CategoryResponse,
    PlayerInput,
    ProjectionBatchResponse,
    ProjectionRequest,
    ProjectionResponse,
)

__all__ = [
    "CategoryResponse",
    "FuzzyMatchResponse",
    "IdentityResponse",
    "PlayerInput",
    "ProjectionBatchResponse",
    "ProjectionRequest",
    "ProjectionResponse",
    "RegistryResponse",
    "ResolutionPreviewResponse",
    "ResolvedNameResponse",
    "ResolveRequest",
    "ResolveResponse",
]
