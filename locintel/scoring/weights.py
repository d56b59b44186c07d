from dataclasses import fields, replace
from typing import Any, Mapping, Optional
from loguru import logger

from locintel.models import BrandFitWeights

DEFAULT_BRAND_FIT_WEIGHTS = BrandFitWeights(
    demographic=0.25,
    footfall=0.25,
    affluence=0.20,
    competition=0.20,
    accessibility=0.10,
)

WEIGHT_KEYS = tuple(f.name for f in fields(BrandFitWeights))


def _coerce_weight(key: str, value: Any) -> float:
    # Stored configs are loosely typed: null counts as 0, anything unparseable as NaN
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug(f"Brand-fit weight '{key}' is not numeric: {value!r}")
        return float("nan")


def get_brand_fit_weights(overrides: Optional[Mapping[str, Any]] = None) -> BrandFitWeights:
    """
    Resolve the Brand-Fit weights for a brand.

    Overrides come from a brand's stored weight config and are merged shallowly,
    per key, over the defaults. Nothing is renormalized or range-checked; a null
    value becomes 0 and a non-numeric one NaN, so a bad config never raises.

    Args:
        overrides (Optional[Mapping[str, Any]]): Partial weight set, e.g. {"demographic": 0.5}.

    Returns:
        BrandFitWeights: The merged weights.
    """
    if not overrides:
        return DEFAULT_BRAND_FIT_WEIGHTS

    known = {}
    for key, value in overrides.items():
        if key not in WEIGHT_KEYS:
            logger.debug(f"Ignoring unknown brand-fit weight '{key}'")
            continue
        known[key] = _coerce_weight(key, value)
    return replace(DEFAULT_BRAND_FIT_WEIGHTS, **known)
