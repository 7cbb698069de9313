"""Pydantic schemas for the online recommendation API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class UsersResponse(BaseModel):
    users: list[str]


class RecommendRequest(BaseModel):
    """Request for user-user CF recommendations."""

    userId: str = Field(..., min_length=1, description="userId as it appears in the ratings file")
    k: int = Field(3, ge=0, le=1000, description="How many neighbors to consider")
    top_n: int = Field(5, ge=0, le=1000, description="Number of recommendations to return")


class NeighborItem(BaseModel):
    userId: str
    similarity: float
    common_rated: int


class RecommendationItem(BaseModel):
    itemId: str
    score: float


class RecommendResponse(BaseModel):
    userId: str
    k: int
    top_n: int
    used_fallback: bool
    neighbors: list[NeighborItem]
    results: list[RecommendationItem]
