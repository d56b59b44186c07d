"""
Typed data models for the location intelligence and brand-fit pipeline.
All data structures used throughout the codebase should be defined here.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

BrandType = Literal["popular", "new"]
SaturationLevel = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class BrandFitWeights:
    """Coefficients of the Brand-Fit formula. Not required to sum to 1.0."""
    demographic: float = 0.25
    footfall: float = 0.25
    affluence: float = 0.20
    competition: float = 0.20
    accessibility: float = 0.10


@dataclass(frozen=True)
class LocationSignal:
    """Snapshot of the scoring inputs for one geographic point."""
    population_density_500m: float = 5000
    population_weighted: float = 50
    category_supply_score: float = 0
    daily_footfall: float = 2000
    footfall_score: float = 0
    accessibility_score: float = 75
    affluence_score: float = 70
    demographic_score: float = 0
    competition_score: float = 0
    competitor_count: int = 0


@dataclass
class ComponentScores:
    """Per-dimension scores fed into the Brand-Fit formula."""
    demographic_score: float
    footfall_score: float
    affluence_score: float
    competition_score: float
    accessibility_score: float


@dataclass
class ScoreResult:
    """Derived scores for one location and one brand. Never persisted here."""
    saturation_index: float
    demand_gap_score: float
    whitespace_score: float
    brand_fit_score: float
    estimated_monthly_revenue: float
    meets_saturation_tolerance: bool = True


@dataclass
class CompetitorEntry:
    """Nearby competitor as returned by the places collaborator."""
    name: str
    user_ratings_total: Optional[int] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    distance_meters: Optional[float] = None
    rating: Optional[float] = None
    address: Optional[str] = None


@dataclass
class CacheEntry:
    """In-process cache record: serialized JSON plus absolute expiry in epoch ms."""
    value: str
    expires_at: float


@dataclass
class MarketSummary:
    saturation_level: SaturationLevel
    competitor_count: int
    summary: str


@dataclass
class BrandProfile:
    """Brand requirements loaded by the persistence collaborator."""
    brand_id: str
    company_name: str
    industry: Optional[str] = None
    weight_overrides: Optional[Dict[str, Any]] = None
    avg_ticket_size: float = 240
    max_saturation_tolerance: float = 80
    preferred_locations: List[str] = field(default_factory=list)


@dataclass
class PropertyCandidate:
    """Listed property considered for a brand."""
    property_id: str
    lat: float
    lng: float
    city: str = ""
    address: str = ""
    property_type: Optional[str] = None
    title: str = ""


@dataclass
class MatchResult:
    """Final brand-to-property match."""
    property_id: str
    brand_fit_score: float
    whitespace_score: float
    demand_gap_score: float
    saturation_index: float
    revenue_projection: float
    meets_saturation_tolerance: bool
    match_reasons: List[str] = field(default_factory=list)
