# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Tracked satellite records.

Parses satellite DTOs delivered by the data source (camelCase JSON keys)
into typed records, and holds the mutable per-object state the registry
updates every frame.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from .coordinate_frames import FrameState


@dataclass(frozen=True)
class SatelliteRecord:
    """Identity, orbital elements and lifecycle metadata of one object."""
    norad_cat_id: int
    object_name: str
    tle_line1: str
    tle_line2: str
    epoch: datetime
    country_code: str | None = None
    launch_date: date | None = None
    decay_date: date | None = None
    last_updated: datetime | None = None

    @property
    def epoch_ms(self) -> float:
        """Element-set epoch in milliseconds since the Unix epoch."""
        return self.epoch.timestamp() * 1000.0


@dataclass
class TrackedObject:
    """
    A satellite owned by the registry.

    state holds the last successfully propagated position; it is left
    untouched on ticks where propagation fails.
    """
    record: SatelliteRecord
    propagator: Any
    marker: Any
    state: FrameState
    failed_ticks: int = field(default=0)

    @property
    def norad_cat_id(self) -> int:
        return self.record.norad_cat_id

    @property
    def epoch_ms(self) -> float:
        return self.record.epoch_ms


def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp, accepting a trailing 'Z'.

    Naive values are treated as UTC.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _optional_date(value: Any) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _optional_datetime(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return parse_datetime(str(value))


def parse_satellite_record(dto: dict[str, Any]) -> SatelliteRecord:
    """
    Parse a satellite DTO into a SatelliteRecord.

    Required keys: noradCatId, objectName, epoch, tleLine1, tleLine2.
    Optional keys: countryCode, launchDate, decayDate, lastUpdated.

    Raises:
        KeyError: If a required key is missing.
        ValueError: If a value cannot be parsed or a TLE line is blank.
    """
    epoch = dto["epoch"]
    if isinstance(epoch, datetime):
        epoch = epoch if epoch.tzinfo else epoch.replace(tzinfo=timezone.utc)
    else:
        epoch = parse_datetime(str(epoch))

    tle_line1 = str(dto["tleLine1"]).strip()
    tle_line2 = str(dto["tleLine2"]).strip()
    if not tle_line1 or not tle_line2:
        raise ValueError(f"Empty TLE line for object {dto.get('objectName', '?')}")

    return SatelliteRecord(
        norad_cat_id=int(dto["noradCatId"]),
        object_name=str(dto["objectName"]),
        tle_line1=tle_line1,
        tle_line2=tle_line2,
        epoch=epoch,
        country_code=dto.get("countryCode"),
        launch_date=_optional_date(dto.get("launchDate")),
        decay_date=_optional_date(dto.get("decayDate")),
        last_updated=_optional_datetime(dto.get("lastUpdated")),
    )
