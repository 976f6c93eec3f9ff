from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Mapping, Optional

from ..core.constants import DEFAULT_ALLOWED_RADIUS_METERS, DEFAULT_LATE_CUTOFF
from ..core.exceptions import ConfigurationError


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float
    address: Optional[str] = None


@dataclass(frozen=True)
class SitePolicy:
    """Where and by when employees of a site are expected to check in."""

    site: str
    location: GeoPoint
    allowed_radius_meters: float = DEFAULT_ALLOWED_RADIUS_METERS
    late_cutoff: time = DEFAULT_LATE_CUTOFF
    timezone: Optional[str] = None


@dataclass(frozen=True)
class Submission:
    """A field check-in as received from the client, before any decision."""

    employee_id: str
    timestamp: datetime
    location: Optional[GeoPoint]
    justification: Optional[str] = None


@dataclass(frozen=True)
class Verdict:
    is_late: bool
    is_out_of_range: bool
    distance_meters: Optional[float]

    @property
    def is_compliant(self) -> bool:
        return not (self.is_late or self.is_out_of_range)


def _parse_cutoff(value) -> time:
    if isinstance(value, time):
        return value
    hours, minutes = str(value).strip().split(":")[:2]
    return time(int(hours), int(minutes))


@dataclass
class SitePolicyRegistry:
    """Site name -> policy lookup built from the ``SITE_POLICIES`` setting."""

    policies: Mapping[str, SitePolicy] = field(default_factory=dict)
    default_site: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        raw: Mapping[str, Mapping],
        *,
        default_site: Optional[str] = None,
        timezone: Optional[str] = None,
    ) -> "SitePolicyRegistry":
        policies: dict[str, SitePolicy] = {}
        for site, cfg in (raw or {}).items():
            try:
                policies[site] = SitePolicy(
                    site=site,
                    location=GeoPoint(latitude=float(cfg["latitude"]), longitude=float(cfg["longitude"])),
                    allowed_radius_meters=float(cfg.get("radius_meters", DEFAULT_ALLOWED_RADIUS_METERS)),
                    late_cutoff=_parse_cutoff(cfg.get("late_cutoff", DEFAULT_LATE_CUTOFF)),
                    timezone=cfg.get("timezone") or timezone,
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid site policy for {site!r}: {e}")
        return cls(policies=policies, default_site=default_site)

    def for_site(self, site: Optional[str]) -> SitePolicy:
        key = site or self.default_site
        policy = self.policies.get(key) if key else None
        if policy is None:
            raise ConfigurationError(f"No attendance policy configured for site {key!r}")
        return policy
