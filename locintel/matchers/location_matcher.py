from rapidfuzz import fuzz
from typing import List
from locintel.config import FUZZY_THRESHOLD
from locintel.models import PropertyCandidate


def in_preferred_location(
    prop: PropertyCandidate,
    preferred_locations: List[str],
    threshold: float = FUZZY_THRESHOLD,
) -> bool:
    """
    Determine whether a property sits in one of the brand's preferred areas.

    Each preferred area is compared against the property's city and address
    with a partial fuzzy ratio, so "Koramangala" matches
    "80 Feet Rd, Koramangala 4th Block".

    Args:
        prop (PropertyCandidate): Property to check.
        preferred_locations (List[str]): Brand's preferred areas.
        threshold (float): Minimum partial ratio (0-100) required for a match.

    Returns:
        bool: True if any preferred area matches.
    """
    city = (prop.city or "").lower()
    address = (prop.address or "").lower()

    for loc in preferred_locations:
        loc_lower = str(loc or "").strip().lower()
        if not loc_lower:
            continue

        city_score = fuzz.partial_ratio(loc_lower, city) if city else 0
        addr_score = fuzz.partial_ratio(loc_lower, address) if address else 0

        # Early exit once either field clears the threshold
        if max(city_score, addr_score) >= threshold:
            return True

    return False
