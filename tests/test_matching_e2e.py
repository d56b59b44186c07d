import pytest
from unittest.mock import AsyncMock, patch

from locintel.intelligence.signals import build_location_signal
from locintel.matchers.matching_orchestrator import matching_orchestrator
from locintel.models import BrandProfile, MatchResult, PropertyCandidate

RAW_SIGNALS = {
    "prop-strong": dict(competitor_count=1, population_500m=5000, population_density_500m=10000,
                        avg_daily_footfall=5000, accessibility_score=80),
    "prop-ok": dict(competitor_count=3, population_500m=4000, population_density_500m=5000,
                    avg_daily_footfall=2500),
    "prop-saturated": dict(competitor_count=10, population_500m=4000, avg_daily_footfall=2500),
}

PROPERTIES = [
    PropertyCandidate(property_id="prop-ok", lat=12.9784, lng=77.6408, city="Bangalore",
                      address="100 Feet Rd, Indiranagar", property_type="retail"),
    PropertyCandidate(property_id="prop-saturated", lat=12.9750, lng=77.6063, city="Bangalore",
                      address="MG Road", property_type="retail"),
    PropertyCandidate(property_id="prop-strong", lat=12.9352, lng=77.6245, city="Bangalore",
                      address="80 Feet Rd, Koramangala", property_type="retail"),
    PropertyCandidate(property_id="prop-broken", lat=12.9121, lng=77.6446, city="Bangalore",
                      address="HSR Layout", property_type="retail"),
]


def _acquirer():
    by_coords = {(p.lat, p.lng): p.property_id for p in PROPERTIES}

    async def acquire(lat, lng, property_type, business_type):
        property_id = by_coords[(lat, lng)]
        if property_id == "prop-broken":
            raise RuntimeError("geodata provider timed out")
        return build_location_signal(**RAW_SIGNALS[property_id])

    return AsyncMock(side_effect=acquire)


@pytest.mark.asyncio
async def test_matching_orchestrator_filters_and_ranks():
    """
    Runs the orchestrator over properties of varying quality and checks that
    weak, saturated and failed lookups are dropped and the rest are ranked.
    """
    brand = BrandProfile(
        brand_id="brand-1",
        company_name="Leaf & Bean",
        industry="cafe",
        preferred_locations=["Koramangala"],
    )
    acquire = _acquirer()

    results = await matching_orchestrator(brand, PROPERTIES, acquire)

    assert all(isinstance(r, MatchResult) for r in results)
    assert [r.property_id for r in results] == ["prop-strong", "prop-ok"]
    assert all(r.brand_fit_score >= 60 for r in results)

    strong, ok = results
    assert strong.brand_fit_score > ok.brand_fit_score
    assert ok.brand_fit_score == 62
    assert ok.revenue_projection == 216000
    assert any("Koramangala" in reason for reason in strong.match_reasons)
    assert not any("location match" in reason for reason in ok.match_reasons)
    assert len(strong.match_reasons) <= 5

    # Every property was looked up once, with the brand's industry as business type
    assert acquire.await_count == 4
    assert all(call.args[3] == "cafe" for call in acquire.await_args_list)


@pytest.mark.asyncio
async def test_matching_orchestrator_applies_weight_overrides_and_threshold():
    """Brand overrides change the ranking inputs; a lower threshold keeps more matches."""
    brand = BrandProfile(
        brand_id="brand-2",
        company_name="Quiet Corner",
        weight_overrides={"competition": 0.0, "footfall": 0.0},
        max_saturation_tolerance=100,
    )

    results = await matching_orchestrator(brand, PROPERTIES[:3], _acquirer(), min_match_score=0)

    scores = {r.property_id: r.brand_fit_score for r in results}
    # 0.25*80 + 0.2*70 + 0.1*75 = 41.5
    assert scores["prop-saturated"] == 42
    assert scores["prop-ok"] == 42
    assert len(results) == 3


@pytest.mark.asyncio
async def test_matching_orchestrator_reuses_cached_signals():
    brand = BrandProfile(brand_id="brand-3", company_name="Repeat Co", industry="cafe")
    acquire = _acquirer()

    await matching_orchestrator(brand, PROPERTIES[:3], acquire)
    await matching_orchestrator(brand, PROPERTIES[:3], acquire)

    assert acquire.await_count == 3


@pytest.mark.asyncio
async def test_matching_orchestrator_logs_failed_lookups():
    brand = BrandProfile(brand_id="brand-4", company_name="Solo")

    with patch("locintel.matchers.matching_orchestrator.logger") as mock_logger:
        results = await matching_orchestrator(brand, PROPERTIES[3:], _acquirer())

    assert results == []
    assert any("prop-broken" in str(c.args[0]) for c in mock_logger.debug.call_args_list)


@pytest.mark.asyncio
async def test_matching_orchestrator_tolerates_loose_weight_config():
    """A null weight scores as 0; a non-numeric one leaves nothing above the threshold."""
    nulled = BrandProfile(
        brand_id="brand-5",
        company_name="Null Footfall",
        weight_overrides={"footfall": None},
    )

    results = await matching_orchestrator(nulled, PROPERTIES[:3], _acquirer())

    # 0.25*100 + 0.2*70 + 0.2*90 + 0.1*80 = 65; prop-ok drops to 49.5
    assert [(r.property_id, r.brand_fit_score) for r in results] == [("prop-strong", 65)]

    garbled = BrandProfile(
        brand_id="brand-6",
        company_name="Garbled",
        weight_overrides={"affluence": "abc"},
    )

    assert await matching_orchestrator(garbled, PROPERTIES[:3], _acquirer()) == []
