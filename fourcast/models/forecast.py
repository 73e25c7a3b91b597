"""Normalized forecast models, independent of the upstream provider."""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

from fourcast.models.common import parse_timestamp


@dataclass(frozen=True)
class CurrentConditions:
    temperature: float
    temperature_unit: str
    conditions: str
    observed_at: datetime
    feels_like: float | None = None
    detailed_conditions: str | None = None
    humidity: float | None = None
    wind_speed: str | None = None
    wind_direction: str | None = None
    icon: str | None = None
    location_name: str | None = None


@dataclass(frozen=True)
class DailyForecast:
    date: date
    high: float | None
    low: float | None
    conditions: str


@dataclass(frozen=True)
class NormalizedForecast:
    current: CurrentConditions
    extended: tuple[DailyForecast, ...] = field(default_factory=tuple)
    provider: str = ""

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation used for storage and API responses."""
        data = asdict(self)
        data["current"]["observed_at"] = self.current.observed_at.isoformat()
        data["extended"] = [
            {**entry, "date": entry["date"].isoformat()} for entry in data["extended"]
        ]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NormalizedForecast":
        current = dict(data["current"])
        observed_at = parse_timestamp(current.get("observed_at"))
        if observed_at is None:
            raise ValueError(
                f"Invalid observed_at in stored forecast: {current.get('observed_at')!r}"
            )
        current["observed_at"] = observed_at

        extended = []
        for entry in data.get("extended") or []:
            day = entry["date"]
            extended.append(
                DailyForecast(
                    date=day if isinstance(day, date) else date.fromisoformat(day),
                    high=entry.get("high"),
                    low=entry.get("low"),
                    conditions=entry.get("conditions", ""),
                )
            )

        return cls(
            current=CurrentConditions(**current),
            extended=tuple(extended),
            provider=data.get("provider", ""),
        )
