"""Geo/time validation of a check-in.

Pure functions: given a submission and the site policy they produce a
:class:`Verdict`, never a decision. Deciding what to do with a failed
verdict is the justification gate's job.
"""

from __future__ import annotations

import math

from ..common.datetime_utils import local_time_of_day
from ..core.constants import EARTH_RADIUS_METERS
from .model import GeoPoint, SitePolicy, Submission, Verdict


def haversine_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in meters."""

    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def is_late(submission: Submission, policy: SitePolicy) -> bool:
    return local_time_of_day(submission.timestamp, policy.timezone) > policy.late_cutoff


def validate(submission: Submission, policy: SitePolicy) -> Verdict:
    late = is_late(submission, policy)

    # No location means we cannot prove the employee is on site: fail closed.
    if submission.location is None:
        return Verdict(is_late=late, is_out_of_range=True, distance_meters=None)

    distance = haversine_meters(policy.location, submission.location)
    return Verdict(
        is_late=late,
        is_out_of_range=distance > policy.allowed_radius_meters,
        distance_meters=distance,
    )
