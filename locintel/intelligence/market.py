import math
import re
from typing import Iterable, List, Mapping, Optional, Tuple

from locintel.models import CompetitorEntry, MarketSummary, SaturationLevel

EARTH_RADIUS_M = 6371000

FOOD_AND_BEVERAGE_PLACE_TYPES = ("restaurant", "cafe", "bar", "bakery")

_SUMMARY_TEMPLATES = {
    "low": "Low saturation in this category ({count} nearby). Good opportunity to establish presence.",
    "medium": "Moderate competition in this category ({count} nearby). Differentiate by concept and experience.",
    "high": "High saturation in this category ({count} nearby). Best for strong brands with clear differentiation.",
}


def haversine_distance_meters(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Great-circle distance in meters between two (lat, lng) pairs."""
    lat1, lng1 = map(math.radians, a)
    lat2, lng2 = map(math.radians, b)
    d_lat = lat2 - lat1
    d_lng = lng2 - lng1

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def map_to_place_type_and_keyword(
    property_type: Optional[str] = None,
    business_type: Optional[str] = None,
) -> Tuple[str, str]:
    """
    Map a property/business type to a places category and search keyword,
    so competitor searches only return the same category.

    Returns:
        Tuple[str, str]: (place_type, keyword). Keyword may be empty.
    """
    raw = f"{business_type or ''} {property_type or ''}".lower()
    p = (property_type or "").lower()

    if re.search(r"\b(qsr|quick service|fast food)\b", raw) or re.search(r"\b(cafe|café|coffee)\b", raw):
        return "cafe", "cafe coffee"
    if re.search(r"\brestaurant\b", raw) or "restaurant" in p:
        return "restaurant", "restaurant"
    if re.search(r"\b(dessert|desserts|sweet|sweets|bakery|ice cream|cake)\b", raw):
        return "bakery", "dessert bakery sweets"
    if re.search(r"\b(bar|brew)\b", raw):
        return "bar", "bar"
    if re.search(r"\bretail\b", raw) or "retail" in p:
        return "clothing_store", "retail store"
    if "office" in p:
        return "point_of_interest", "office"
    return "point_of_interest", ""


def saturation_level(competitor_count: int) -> SaturationLevel:
    if competitor_count <= 2:
        return "low"
    if competitor_count >= 8:
        return "high"
    return "medium"


def market_summary(competitor_count: int) -> MarketSummary:
    level = saturation_level(competitor_count)
    return MarketSummary(
        saturation_level=level,
        competitor_count=competitor_count,
        summary=_SUMMARY_TEMPLATES[level].format(count=competitor_count),
    )


def estimate_daily_footfall(competitor_count: int, place_type: str) -> int:
    """
    Modeled daily footfall for a category. Not sensor data: busier categories
    and more competitors imply more passers-by.
    """
    if place_type in FOOD_AND_BEVERAGE_PLACE_TYPES:
        base_daily, per_competitor = 2800, 180
    else:
        base_daily, per_competitor = 1800, 120
    return round(base_daily + competitor_count * per_competitor)


def nearby_competitors(
    origin: Tuple[float, float],
    places: Iterable[Mapping],
) -> List[CompetitorEntry]:
    """
    Convert raw places results into competitors sorted by distance from origin.
    Places without numeric coordinates are dropped.

    Args:
        origin (Tuple[float, float]): (lat, lng) of the property.
        places (Iterable[Mapping]): Places API style results with
            geometry.location.lat/lng, name, rating, user_ratings_total, vicinity.

    Returns:
        List[CompetitorEntry]: Competitors, nearest first.
    """
    competitors = []
    for place in places:
        location = (place.get("geometry") or {}).get("location") or {}
        lat, lng = location.get("lat"), location.get("lng")
        if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
            continue

        rating = place.get("rating")
        total = place.get("user_ratings_total")
        competitors.append(CompetitorEntry(
            name=place.get("name") or "",
            user_ratings_total=total if isinstance(total, int) else None,
            lat=lat,
            lng=lng,
            distance_meters=haversine_distance_meters(origin, (lat, lng)),
            rating=rating if isinstance(rating, (int, float)) else None,
            address=place.get("vicinity") or place.get("formatted_address"),
        ))

    competitors.sort(key=lambda c: c.distance_meters)
    return competitors
