"""
Classify competitors as popular (well-known chains) or new/emerging brands.
Used to surface new-age brands ahead of established chains.
"""
from typing import Iterable, List, Optional, Tuple

from locintel.config import POPULAR_REVIEW_THRESHOLD
from locintel.models import BrandType, CompetitorEntry

POPULAR_BRAND_PATTERNS = (
    "starbucks", "cafe coffee day", "ccd", "blue tokai", "third wave coffee", "chaayos", "chai point",
    "mcdonald", "kfc", "pizza hut", "domino", "subway", "haldiram", "bikanervala", "barista",
    "costa coffee", "dunkin", "krispy kreme", "faasos", "wow momo", "saravana bhavan", "sagar ratna",
    "indian coffee house", "dmart", "reliance", "big bazaar", "pantaloons", "marks & spencer",
    "tcafe", "cafe mcc", "pepperfry", "urban ladder", "woodland", "bata", "crocs",
    "decathlon", "ikea", "miniso", "westside", "titan", "tanishq", "tata", "relaxo",
)


def classify_brand(name: Optional[str], user_ratings_total: Optional[int] = None) -> BrandType:
    """
    Label a competitor as "popular" or "new".

    Matching is plain substring containment on the lowercased name, so short
    fragments (e.g. "ccd", "tata") can hit unrelated names.

    Args:
        name (Optional[str]): Competitor display name.
        user_ratings_total (Optional[int]): Review count, if known.

    Returns:
        BrandType: "popular" for known chains or heavily reviewed places, else "new".
    """
    n = (name or "").strip().lower()
    if not n:
        return "new"

    is_known_chain = any(pattern in n for pattern in POPULAR_BRAND_PATTERNS)
    has_high_review_count = (user_ratings_total or 0) >= POPULAR_REVIEW_THRESHOLD

    if is_known_chain or has_high_review_count:
        return "popular"
    return "new"


def split_competitors(
    competitors: Iterable[CompetitorEntry],
) -> Tuple[List[CompetitorEntry], List[CompetitorEntry]]:
    """Partition competitors into (popular, new), preserving input order."""
    popular: List[CompetitorEntry] = []
    new: List[CompetitorEntry] = []
    for comp in competitors:
        if classify_brand(comp.name, comp.user_ratings_total) == "popular":
            popular.append(comp)
        else:
            new.append(comp)
    return popular, new
