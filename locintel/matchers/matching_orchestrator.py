# locintel/matchers/matching_orchestrator.py

import asyncio
from typing import List
from loguru import logger

from locintel.config import MIN_MATCH_SCORE
from locintel.intelligence.signals import SignalAcquirer, fetch_location_signal
from locintel.matchers.location_matcher import in_preferred_location
from locintel.models import BrandProfile, MatchResult, PropertyCandidate, ScoreResult
from locintel.scoring.location_scorer import score_location
from locintel.scoring.weights import get_brand_fit_weights

MAX_MATCH_REASONS = 5


def _match_reasons(
    brand: BrandProfile,
    prop: PropertyCandidate,
    score: ScoreResult,
) -> List[str]:
    reasons = []
    if brand.preferred_locations and in_preferred_location(prop, brand.preferred_locations):
        reasons.append(f"Perfect location match - in {prop.address or prop.city}")
    if score.whitespace_score >= 70:
        reasons.append("Strong whitespace - high demand with little competition")
    if score.demand_gap_score >= 30:
        reasons.append("Underserved area - demand exceeds existing supply")
    if score.saturation_index <= 20:
        reasons.append("Low competitor saturation")
    elif not score.meets_saturation_tolerance:
        reasons.append("Competitor saturation above brand tolerance")
    if score.estimated_monthly_revenue > 0:
        reasons.append(f"Projected revenue ₹{score.estimated_monthly_revenue:,}/month")
    return reasons[:MAX_MATCH_REASONS]


async def matching_orchestrator(
    brand: BrandProfile,
    properties: List[PropertyCandidate],
    acquire: SignalAcquirer,
    min_match_score: float = MIN_MATCH_SCORE,
) -> List[MatchResult]:
    """
    Score every property for a brand and keep those at or above the threshold.

    Args:
        brand (BrandProfile): Brand requirements and weight overrides.
        properties (List[PropertyCandidate]): Properties to consider.
        acquire (SignalAcquirer): Geodata collaborator used on cache misses.
        min_match_score (float): Minimum brand-fit score to keep a match.

    Returns:
        List[MatchResult]: Matches sorted by brand-fit score, best first.
    """
    weights = get_brand_fit_weights(brand.weight_overrides)

    # Resolve all signals in parallel; one failing lookup must not sink the batch
    signals = await asyncio.gather(
        *[
            fetch_location_signal(p.lat, p.lng, acquire, p.property_type, brand.industry)
            for p in properties
        ],
        return_exceptions=True,
    )

    scored = []
    for prop, signal in zip(properties, signals):
        if isinstance(signal, Exception):
            logger.debug(f"⚠️ Signal lookup failed for property {prop.property_id}: {signal}")
            continue

        score = score_location(
            signal,
            weights,
            avg_ticket_size=brand.avg_ticket_size,
            max_saturation_tolerance=brand.max_saturation_tolerance,
        )
        scored.append(MatchResult(
            property_id=prop.property_id,
            brand_fit_score=score.brand_fit_score,
            whitespace_score=score.whitespace_score,
            demand_gap_score=score.demand_gap_score,
            saturation_index=score.saturation_index,
            revenue_projection=score.estimated_monthly_revenue,
            meets_saturation_tolerance=score.meets_saturation_tolerance,
            match_reasons=_match_reasons(brand, prop, score),
        ))

    matches = [m for m in scored if m.brand_fit_score >= min_match_score]
    logger.debug(
        f"[Matching] {brand.brand_id}: {len(scored)} scored, "
        f"{len(matches)} at or above {min_match_score}"
    )

    matches.sort(key=lambda m: m.brand_fit_score, reverse=True)
    return matches
