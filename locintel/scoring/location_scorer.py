from typing import Optional

from locintel.models import BrandFitWeights, ComponentScores, LocationSignal, ScoreResult
from locintel.scoring.formulas import (
    cap_at,
    compute_brand_fit_score,
    compute_demand_gap_score,
    compute_saturation_index,
    compute_whitespace_score,
    estimate_monthly_revenue,
    floor_at,
    round_half_away,
)
from locintel.scoring.weights import DEFAULT_BRAND_FIT_WEIGHTS

FOOTFALL_SCORE_CEILING = 5000
SATURATION_PENALTY_CAP = 50


def compute_footfall_score(daily_footfall: float) -> float:
    """Normalize daily footfall to 0-100, with 5000/day scoring 100."""
    return cap_at(round_half_away(daily_footfall / FOOTFALL_SCORE_CEILING * 100))


def score_location(
    signal: LocationSignal,
    weights: Optional[BrandFitWeights] = None,
    avg_ticket_size: float = 240,
    capture_rate_percent: float = 1.2,
    max_saturation_tolerance: float = 80,
) -> ScoreResult:
    """
    Score one location for one brand.

    Args:
        signal (LocationSignal): Raw location inputs.
        weights (Optional[BrandFitWeights]): Brand weights; defaults when None.
        avg_ticket_size (float): Brand's average ticket, used for revenue.
        capture_rate_percent (float): Share of footfall converted to customers.
        max_saturation_tolerance (float): Saturation above which the brand fit
            is capped at 50.

    Returns:
        ScoreResult: All derived scores for this location.
    """
    weights = weights or DEFAULT_BRAND_FIT_WEIGHTS

    saturation = compute_saturation_index(signal.competitor_count, signal.population_density_500m)
    inverse_saturation = floor_at(100 - saturation)
    demand_gap = compute_demand_gap_score(signal.population_weighted, signal.category_supply_score)
    whitespace = compute_whitespace_score(demand_gap, inverse_saturation, signal.footfall_score)

    brand_fit = compute_brand_fit_score(
        ComponentScores(
            demographic_score=signal.demographic_score,
            footfall_score=signal.footfall_score,
            affluence_score=signal.affluence_score,
            competition_score=signal.competition_score,
            accessibility_score=signal.accessibility_score,
        ),
        weights,
    )

    meets_saturation = saturation <= max_saturation_tolerance
    if not meets_saturation:
        brand_fit = cap_at(brand_fit, SATURATION_PENALTY_CAP)

    return ScoreResult(
        saturation_index=saturation,
        demand_gap_score=demand_gap,
        whitespace_score=whitespace,
        brand_fit_score=brand_fit,
        estimated_monthly_revenue=estimate_monthly_revenue(
            signal.daily_footfall, capture_rate_percent, avg_ticket_size
        ),
        meets_saturation_tolerance=meets_saturation,
    )
