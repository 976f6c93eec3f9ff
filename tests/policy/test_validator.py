from __future__ import annotations

from datetime import datetime, time, timezone

import pytest

from hr_workflow.core.exceptions import ConfigurationError
from hr_workflow.policy.model import GeoPoint, SitePolicy, SitePolicyRegistry, Submission
from hr_workflow.policy.validator import haversine_meters, is_late, validate

HQ = GeoPoint(latitude=23.8103, longitude=90.4125)


def _submission(ts: datetime, location=HQ) -> Submission:
    return Submission(employee_id="E1", timestamp=ts, location=location)


def test_haversine_zero_for_same_point():
    assert haversine_meters(HQ, HQ) == pytest.approx(0.0)


def test_haversine_one_degree_of_latitude():
    a = GeoPoint(latitude=0.0, longitude=0.0)
    b = GeoPoint(latitude=1.0, longitude=0.0)
    assert haversine_meters(a, b) == pytest.approx(111_195, abs=1)


def test_haversine_is_symmetric():
    far = GeoPoint(latitude=23.8553, longitude=90.4125)
    assert haversine_meters(HQ, far) == pytest.approx(haversine_meters(far, HQ))


@pytest.mark.parametrize(
    "at, late",
    [
        (time(8, 59), False),
        (time(9, 15), False),
        (time(9, 15, 30), True),
        (time(9, 16), True),
        (time(18, 0), True),
    ],
)
def test_late_only_strictly_after_cutoff(at, late):
    policy = SitePolicy(site="HQ", location=HQ, late_cutoff=time(9, 15))
    ts = datetime.combine(datetime(2026, 3, 2).date(), at)
    assert is_late(_submission(ts), policy) is late


def test_late_uses_site_wall_clock_for_aware_timestamps():
    policy = SitePolicy(site="HQ", location=HQ, late_cutoff=time(9, 15), timezone="Asia/Dhaka")
    # 03:30 UTC is 09:30 in Dhaka.
    ts = datetime(2026, 3, 2, 3, 30, tzinfo=timezone.utc)
    assert is_late(_submission(ts), policy) is True


def test_within_radius_is_compliant():
    policy = SitePolicy(site="HQ", location=HQ, allowed_radius_meters=500)
    nearby = GeoPoint(latitude=23.8113, longitude=90.4125)  # ~111 m north

    verdict = validate(_submission(datetime(2026, 3, 2, 8, 55), nearby), policy)

    assert verdict.is_compliant
    assert verdict.distance_meters == pytest.approx(111, abs=1)


def test_far_and_late_flags_both():
    policy = SitePolicy(site="HQ", location=HQ, allowed_radius_meters=500)
    far = GeoPoint(latitude=23.8553, longitude=90.4125)  # ~5 km north

    verdict = validate(_submission(datetime(2026, 3, 2, 9, 30), far), policy)

    assert verdict.is_late and verdict.is_out_of_range
    assert verdict.distance_meters == pytest.approx(5004, abs=5)


def test_radius_boundary_is_inclusive():
    point = GeoPoint(latitude=23.8113, longitude=90.4125)
    exact = haversine_meters(HQ, point)
    policy = SitePolicy(site="HQ", location=HQ, allowed_radius_meters=exact)

    verdict = validate(_submission(datetime(2026, 3, 2, 8, 0), point), policy)

    assert verdict.is_out_of_range is False


def test_missing_location_counts_as_out_of_range():
    policy = SitePolicy(site="HQ", location=HQ)

    verdict = validate(_submission(datetime(2026, 3, 2, 8, 0), location=None), policy)

    assert verdict.is_out_of_range is True
    assert verdict.distance_meters is None
    assert verdict.is_late is False


def test_registry_from_settings_applies_defaults():
    registry = SitePolicyRegistry.from_settings(
        {"HQ": {"latitude": "23.8103", "longitude": 90.4125, "late_cutoff": "10:00"}},
        timezone="Asia/Dhaka",
    )
    policy = registry.for_site("HQ")

    assert policy.allowed_radius_meters == 500.0
    assert policy.late_cutoff == time(10, 0)
    assert policy.timezone == "Asia/Dhaka"


def test_registry_falls_back_to_default_site():
    registry = SitePolicyRegistry.from_settings({"HQ": {"latitude": 1, "longitude": 2}}, default_site="HQ")
    assert registry.for_site(None).site == "HQ"


def test_registry_unknown_site_is_configuration_error():
    registry = SitePolicyRegistry.from_settings({"HQ": {"latitude": 1, "longitude": 2}})
    with pytest.raises(ConfigurationError):
        registry.for_site("Chittagong")


def test_registry_rejects_incomplete_policy():
    with pytest.raises(ConfigurationError):
        SitePolicyRegistry.from_settings({"HQ": {"latitude": 1}})
