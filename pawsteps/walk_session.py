"""Finished walk session aggregate."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from .const import METERS_PER_MILE, UNKNOWN_BREED_NAME
from .types import ActiveSessionTotals, DataSource, WalkSessionData, WalkSessionPayload
from .utils import ensure_utc_datetime, format_clock_duration, format_pace

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WalkSession:
    """Immutable record of one finished walk.

    Only the measured fields are stored; duration text, distance units, pace
    and the summary line are derived on read.
    """

    start_time: datetime
    end_time: datetime
    duration_seconds: float
    human_steps: int
    estimated_dog_steps: int
    distance_meters: float
    breed_name: str = UNKNOWN_BREED_NAME
    breed_multiplier: float = 1.0
    data_source: DataSource = DataSource.CORE_MOTION
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def finalize(
        cls,
        totals: ActiveSessionTotals,
        *,
        end_time: datetime,
        estimated_dog_steps: int,
        breed_name: str,
        breed_multiplier: float,
        data_source: DataSource = DataSource.CORE_MOTION,
    ) -> WalkSession:
        """Freeze live session totals into a finished walk ending at ``end_time``."""
        return cls(
            start_time=totals.start_time,
            end_time=end_time,
            duration_seconds=totals.duration_seconds(end_time),
            human_steps=totals.steps,
            estimated_dog_steps=estimated_dog_steps,
            distance_meters=totals.distance_meters,
            breed_name=breed_name,
            breed_multiplier=breed_multiplier,
            data_source=data_source,
        )

    @property
    def is_active(self) -> bool:
        return False

    @property
    def formatted_duration(self) -> str:
        return format_clock_duration(self.duration_seconds)

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000.0

    @property
    def distance_miles(self) -> float:
        return self.distance_meters / METERS_PER_MILE

    @property
    def average_pace(self) -> str:
        """Minutes per kilometre as ``M'SS"``, or ``--'--"`` without distance."""
        return format_pace(self.duration_seconds, self.distance_km)

    @property
    def summary(self) -> str:
        return f"{self.estimated_dog_steps} dog steps in {self.formatted_duration}"

    def to_session_data(self) -> WalkSessionData:
        return WalkSessionData(
            steps=self.human_steps,
            distance_meters=self.distance_meters,
            duration_seconds=self.duration_seconds,
            start_time=self.start_time,
            end_time=self.end_time,
        )

    def as_dict(self) -> WalkSessionPayload:
        return {
            "id": self.id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_seconds": self.duration_seconds,
            "human_steps": self.human_steps,
            "estimated_dog_steps": self.estimated_dog_steps,
            "distance_meters": self.distance_meters,
            "breed_name": self.breed_name,
            "breed_multiplier": self.breed_multiplier,
            "data_source": self.data_source.value,
        }

    @classmethod
    def from_dict(cls, data: WalkSessionPayload) -> WalkSession:
        """Restore a stored walk.

        Raises:
            ValueError: A timestamp is missing or unparsable.
        """
        start_time = ensure_utc_datetime(data.get("start_time"))
        end_time = ensure_utc_datetime(data.get("end_time"))
        if start_time is None or end_time is None:
            raise ValueError(f"Walk session {data.get('id')} has invalid timestamps")

        data_source = DataSource.parse(data.get("data_source"))
        if data_source is None:
            _LOGGER.debug(
                "Unknown data source %r for walk %s", data.get("data_source"), data.get("id")
            )
            data_source = DataSource.CORE_MOTION

        return cls(
            id=str(data["id"]),
            start_time=start_time,
            end_time=end_time,
            duration_seconds=float(data["duration_seconds"]),
            human_steps=int(data["human_steps"]),
            estimated_dog_steps=int(data["estimated_dog_steps"]),
            distance_meters=float(data["distance_meters"]),
            breed_name=data.get("breed_name") or UNKNOWN_BREED_NAME,
            breed_multiplier=float(data.get("breed_multiplier", 1.0)),
            data_source=data_source,
        )
