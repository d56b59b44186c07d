"""
Derived intelligence formulas: Saturation, Demand Gap, Whitespace, Brand Fit
and the monthly revenue projection.

All functions are total over the numeric domain. Inputs are not validated;
NaN propagates instead of being clamped into range.
"""
import math
from decimal import Decimal, ROUND_HALF_UP

from locintel.models import BrandFitWeights, ComponentScores
from locintel.scoring.weights import DEFAULT_BRAND_FIT_WEIGHTS


def round_half_away(value: float) -> float:
    """Round to the nearest integer, halves away from zero. Non-finite values pass through."""
    if not math.isfinite(value):
        return value
    return int(Decimal(value).to_integral_value(rounding=ROUND_HALF_UP))


def cap_at(value: float, upper: float = 100) -> float:
    """min(upper, value) that leaves NaN as NaN."""
    return value if math.isnan(value) else min(upper, value)


def floor_at(value: float, lower: float = 0) -> float:
    """max(lower, value) that leaves NaN as NaN."""
    return value if math.isnan(value) else max(lower, value)


def compute_saturation_index(competitor_count: float, population_density_500m: float = 5000) -> float:
    """Saturation Index: competitor_count / max(1, density per 1000) scaled to 0-100."""
    if competitor_count <= 0:
        return 0
    raw = competitor_count / floor_at(population_density_500m / 1000, 1)
    return cap_at(round_half_away(raw * 100))


def compute_demand_gap_score(population_weighted: float, category_supply_score: float) -> float:
    """Demand Gap Score: high = underserved (good opportunity)."""
    gap = floor_at(population_weighted - category_supply_score)
    return cap_at(round_half_away(gap))


def compute_whitespace_score(
    demand_score: float,
    inverse_saturation_score: float,
    footfall_score: float,
) -> float:
    """Whitespace Score: high demand + low competition + good footfall."""
    w = demand_score * 0.4 + inverse_saturation_score * 0.4 + footfall_score * 0.2
    return cap_at(round_half_away(w))


def compute_brand_fit_score(
    scores: ComponentScores,
    weights: BrandFitWeights = DEFAULT_BRAND_FIT_WEIGHTS,
) -> float:
    """Brand Fit Score: weighted combination, capped at 100 but not floored."""
    total = (
        weights.demographic * scores.demographic_score
        + weights.footfall * scores.footfall_score
        + weights.affluence * scores.affluence_score
        + weights.competition * scores.competition_score
        + weights.accessibility * scores.accessibility_score
    )
    return cap_at(round_half_away(total))


def estimate_monthly_revenue(
    daily_footfall: float,
    capture_rate_percent: float = 1.2,
    avg_ticket_size: float = 240,
) -> float:
    """
    Monthly revenue projection (gross, before rent/COGS).

    daily_footfall x 30 days x (capture_rate / 100) x avg_ticket_size. The defaults
    (1.2% capture, 240 average ticket) are calibrated for cafe/QSR outlets.
    """
    daily_revenue = daily_footfall * (capture_rate_percent / 100) * avg_ticket_size
    return round_half_away(daily_revenue * 30)
