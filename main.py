import os
import asyncio
import json
import pandas as pd
import csv
from typing import Dict, List, Optional, Tuple
import sys
from loguru import logger

from locintel.models import BrandProfile, LocationSignal, PropertyCandidate
from locintel.intelligence.signals import build_location_signal
from locintel.matchers.matching_orchestrator import matching_orchestrator
from locintel.cache import close_cache
from locintel.config import (
    BATCH_SIZE,
    BRAND_ID,
    BRAND_INDUSTRY,
    BRAND_NAME,
    BRAND_WEIGHT_OVERRIDES,
    INPUT_CSV,
    LOG_LEVEL,
    OUTPUT_CSV,
)

SIGNAL_COLUMNS = (
    "competitor_count",
    "population_500m",
    "population_density_500m",
    "avg_daily_footfall",
    "affluence_score",
    "accessibility_score",
)


def load_properties_from_csv(
    file_path: str, nrows: int = None
) -> Tuple[List[PropertyCandidate], Dict[str, dict]]:
    """
    Load properties and their raw location data from CSV.

    Returns:
        Tuple of (properties, raw signal inputs keyed by property_id).
    """
    df = pd.read_csv(file_path, nrows=nrows)
    properties = []
    raw_signals = {}
    for _, row in df.iterrows():
        # Helper to safely extract values from pandas Series, converting NaN to None
        def safe_get(col):
            if col not in row.index:
                return None
            val = row[col]
            if pd.isna(val):
                return None
            return val

        lat, lng = float(row["lat"]), float(row["lng"])
        prop = PropertyCandidate(
            property_id=str(row["property_id"]),
            lat=lat,
            lng=lng,
            city=str(safe_get("city") or ""),
            address=str(safe_get("address") or ""),
            property_type=safe_get("property_type"),
            title=str(safe_get("title") or ""),
        )
        properties.append(prop)
        # numpy scalars are not JSON serializable, so cached signals need plain floats
        raw_signals[prop.property_id] = {
            col: float(safe_get(col)) if safe_get(col) is not None else None
            for col in SIGNAL_COLUMNS
        }
    return properties, raw_signals


def load_brand_from_config() -> BrandProfile:
    """Build the brand profile from environment configuration."""
    overrides = json.loads(BRAND_WEIGHT_OVERRIDES) if BRAND_WEIGHT_OVERRIDES else None
    return BrandProfile(
        brand_id=BRAND_ID,
        company_name=BRAND_NAME,
        industry=BRAND_INDUSTRY,
        weight_overrides=overrides,
    )


def csv_signal_acquirer(properties: List[PropertyCandidate], raw_signals: Dict[str, dict]):
    """
    Acquisition callable serving signals from the loaded CSV rows.

    Signals are looked up, and cached, per location. When several rows share
    coordinates the first row's data serves all of them.
    """
    by_coords = {}
    for prop in properties:
        first = by_coords.setdefault((prop.lat, prop.lng), prop.property_id)
        if first != prop.property_id and raw_signals[first] != raw_signals[prop.property_id]:
            logger.debug(
                f"Property {prop.property_id} shares coordinates with {first}; using {first}'s location data"
            )

    async def acquire(
        lat: float, lng: float, property_type: Optional[str], business_type: Optional[str]
    ) -> LocationSignal:
        raw = raw_signals[by_coords[(lat, lng)]]
        optional = {
            k: raw[k] for k in ("affluence_score", "accessibility_score") if raw[k] is not None
        }
        return build_location_signal(
            competitor_count=int(raw["competitor_count"] or 0),
            population_500m=raw["population_500m"],
            population_density_500m=raw["population_density_500m"],
            avg_daily_footfall=raw["avg_daily_footfall"],
            **optional,
        )
    return acquire


def batch_iter(records: List[PropertyCandidate], batch_size: int):
    """
    Yield index and PropertyCandidate slices of size `batch_size` for batched processing.
    """
    n = len(records)
    for i in range(0, n, batch_size):
        yield i, records[i:i+batch_size]


async def main():
    """
    Orchestrate the full batch matching pipeline.

    - Loads properties from the input CSV.
    - Scores each batch for the configured brand.
    - Writes matches incrementally to an output CSV.
    """
    properties, raw_signals = load_properties_from_csv(INPUT_CSV)
    brand = load_brand_from_config()
    acquire = csv_signal_acquirer(properties, raw_signals)

    # Initialize logs
    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=LOG_LEVEL, format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>")

    # Initialize output file
    output_path = OUTPUT_CSV
    if os.path.exists(output_path):
        os.remove(output_path)
    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "property_id", "brand_fit_score", "whitespace_score", "demand_gap_score",
            "saturation_index", "revenue_projection", "meets_saturation_tolerance", "match_reasons",
        ])

    try:
        for start_idx, batch in batch_iter(properties, BATCH_SIZE):
            logger.info(f"Processing rows {start_idx}..{start_idx + len(batch) - 1}")

            matches = await matching_orchestrator(brand, batch, acquire)

            with open(output_path, "a", newline="") as f:
                writer = csv.writer(f)
                for match in matches:
                    writer.writerow([
                        match.property_id,
                        match.brand_fit_score,
                        match.whitespace_score,
                        match.demand_gap_score,
                        match.saturation_index,
                        match.revenue_projection,
                        match.meets_saturation_tolerance,
                        "; ".join(match.match_reasons),
                    ])
    finally:
        # Cleanup: close the cache client session to prevent unclosed connector warnings
        await close_cache()

if __name__ == "__main__":
    asyncio.run(main())
