import math
from dataclasses import asdict
from typing import Awaitable, Callable, Optional
from loguru import logger

from locintel.cache import cache_get, cache_set, location_intel_cache_key
from locintel.models import LocationSignal
from locintel.scoring.formulas import cap_at, compute_saturation_index, floor_at
from locintel.scoring.location_scorer import compute_footfall_score

DEFAULT_POPULATION_DENSITY_500M = 5000
DEFAULT_DAILY_FOOTFALL = 2000
DEFAULT_POPULATION_WEIGHTED = 50

# (lat, lng, property_type, business_type) -> LocationSignal
SignalAcquirer = Callable[[float, float, Optional[str], Optional[str]], Awaitable[LocationSignal]]


def _present(value: Optional[float]) -> bool:
    # None, 0 and NaN all mean "not measured"
    return bool(value) and not math.isnan(value)


def build_location_signal(
    competitor_count: int,
    population_500m: Optional[float] = None,
    population_density_500m: Optional[float] = None,
    avg_daily_footfall: Optional[float] = None,
    affluence_score: float = 70,
    accessibility_score: float = 75,
) -> LocationSignal:
    """
    Derive a LocationSignal from raw demographic, commercial and mobility data.

    Missing, zero or NaN density falls back to 5000/km² and population to a
    weighted 50. Only a missing footfall falls back (2000/day); NaN is kept.
    Existing category supply is taken as the inverse of saturation.

    Args:
        competitor_count (int): Competitors of the same category nearby.
        population_500m (Optional[float]): Residents within 500m.
        population_density_500m (Optional[float]): Residents per km² within 500m.
        avg_daily_footfall (Optional[float]): Estimated passers-by per day.
        affluence_score (float): 0-100 affluence score.
        accessibility_score (float): 0-100 accessibility score.

    Returns:
        LocationSignal: Inputs ready for score_location.
    """
    density = population_density_500m if _present(population_density_500m) else DEFAULT_POPULATION_DENSITY_500M
    footfall = avg_daily_footfall if avg_daily_footfall is not None else DEFAULT_DAILY_FOOTFALL
    population_weighted = (
        cap_at(population_500m / 50) if _present(population_500m) else DEFAULT_POPULATION_WEIGHTED
    )

    saturation = compute_saturation_index(competitor_count, density)
    inverse_saturation = floor_at(100 - saturation)

    return LocationSignal(
        population_density_500m=density,
        population_weighted=population_weighted,
        category_supply_score=inverse_saturation,
        daily_footfall=footfall,
        footfall_score=compute_footfall_score(footfall),
        accessibility_score=accessibility_score,
        affluence_score=affluence_score,
        demographic_score=population_weighted,
        competition_score=inverse_saturation,
        competitor_count=competitor_count,
    )


def _signal_from_cached(payload) -> Optional[LocationSignal]:
    if not isinstance(payload, dict):
        return None
    try:
        return LocationSignal(**payload)
    except TypeError:
        return None


async def fetch_location_signal(
    lat: float,
    lng: float,
    acquire: SignalAcquirer,
    property_type: Optional[str] = None,
    business_type: Optional[str] = None,
) -> LocationSignal:
    """
    Cache-fronted signal lookup for one location and query shape.

    Args:
        lat (float): Latitude.
        lng (float): Longitude.
        acquire (SignalAcquirer): Geodata collaborator called on a cache miss.
        property_type (Optional[str]): Property type discriminator.
        business_type (Optional[str]): Business type discriminator.

    Returns:
        LocationSignal: Cached or freshly acquired signal.
    """
    key = location_intel_cache_key(lat, lng, property_type, business_type)

    cached = _signal_from_cached(await cache_get(key))
    if cached is not None:
        logger.debug(f"Cache hit for {key}")
        return cached

    signal = await acquire(lat, lng, property_type, business_type)
    await cache_set(key, asdict(signal))
    return signal
