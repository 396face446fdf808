"""
Air quality system module for the District AQI System.

This module contains the AirQualitySystem class, the orchestrator of one
aggregation cycle. It validates the incoming readings, stations and district
boundaries, aggregates every station, resolves every station to a district,
rolls the stations up into district indices, and publishes the finished
result. The previous result stays visible, unchanged, until a new cycle has
completed; a cycle that fails leaves it in place.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

import pandas as pd
from joblib import Parallel, delayed
from shapely.geometry import Point

from .aggregation import DistrictAggregator, StationAggregator
from .aggregation.station_aggregator import FallbackReading
from .aggregation_result import AggregationResult
from .config import Settings
from .cycle_report import (
    DUPLICATE_STATION,
    INVALID_VALUE,
    MISSING_IDENTITY,
    UNKNOWN_STATION,
    CycleReport,
    DroppedRecord,
)
from .district import District
from .district_resolver import DistrictResolver, Resolution
from .errors import MalformedGeometryError, MalformedInputError
from .frames import districts_from_features, readings_from_frame, stations_from_frame
from .geometry import GeometryAdapter
from .pollutant_reading import PollutantReading
from .station import Station
from .station_district_mapping import StationDistrictMapping

logger = logging.getLogger(__name__)


class AirQualitySystem:
    """
    Core orchestrator of the district air quality pipeline.

    Runs the ordered pipeline station aggregation -> district resolution ->
    district aggregation. Per-station work is independent and is dispatched
    through joblib; district aggregation waits for all resolutions to finish.

    Replace-on-complete: current only changes once refresh() has produced a
    full result. Malformed district boundaries fail only their own district,
    which keeps its previous aggregate; if no district is usable the whole
    cycle raises MalformedInputError and the previous result is kept.
    """

    LOG_FILE_NAME = "aggregation_log.log"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        resolver: Optional[DistrictResolver] = None,
        station_aggregator: Optional[StationAggregator] = None,
        district_aggregator: Optional[DistrictAggregator] = None,
        geometry: Optional[GeometryAdapter] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.geometry = geometry or GeometryAdapter()
        self.resolver = resolver or DistrictResolver(
            buffer_radius=self.settings.buffer_radius,
            max_distance=self.settings.max_distance,
            geometry=self.geometry,
        )
        self.station_aggregator = station_aggregator or StationAggregator()
        self.district_aggregator = district_aggregator or DistrictAggregator(self.settings.synthetic_seed)
        self._last_result: Optional[AggregationResult] = None

    @property
    def current(self) -> Optional[AggregationResult]:
        """The last successfully completed result, or None before the first cycle."""
        return self._last_result

    @property
    def log_file(self) -> Path:
        return self.settings.log_dir / self.LOG_FILE_NAME

    def clear(self) -> None:
        """Forget the last result."""
        self._last_result = None

    def refresh(
        self,
        readings: Iterable[PollutantReading],
        stations: Sequence[Station],
        districts: Sequence[District],
        fallback: Optional[FallbackReading] = None,
        enable_persistent_logging: bool = False,
    ) -> AggregationResult:
        """
        Runs one complete aggregation cycle and publishes its result.

        Args:
            readings: Flat sequence of pollutant readings from the feed
            stations: Station metadata (readings already attached are kept)
            districts: District boundaries, in the order used for tie-breaks
            fallback: Optional callable supplying a synthetic reading for a
                station that has no readings
            enable_persistent_logging: If True, append a summary line for
                this cycle to the persistent log file

        Returns:
            The new AggregationResult, which is also exposed as current

        Raises:
            MalformedInputError: If no district boundary is usable; current
                is left unchanged
        """
        result = self._run_cycle(readings, stations, districts, fallback, extra_dropped=[])
        self._last_result = result
        if enable_persistent_logging:
            self._log_cycle(result)
        return result

    def refresh_from_frames(
        self,
        readings_df: pd.DataFrame,
        stations_df: pd.DataFrame,
        district_features: Iterable[Mapping[str, Any]],
        fallback: Optional[FallbackReading] = None,
        enable_persistent_logging: bool = False,
    ) -> AggregationResult:
        """
        Same as refresh(), taking pandas frames and GeoJSON-like features.

        Rows rejected while converting the frames are added to the cycle
        report's dropped records.
        """
        readings, dropped_readings = readings_from_frame(readings_df)
        stations, dropped_stations = stations_from_frame(stations_df)
        districts = districts_from_features(district_features)

        result = self._run_cycle(
            readings, stations, districts, fallback,
            extra_dropped=dropped_stations + dropped_readings,
        )
        self._last_result = result
        if enable_persistent_logging:
            self._log_cycle(result)
        return result

    def locate(self, x: float, y: float) -> tuple[Optional[District], Resolution]:
        """
        Finds the district of an arbitrary location in the current result.

        Uses the same three tiers as station resolution, so a user standing
        just outside a district boundary still gets that district.

        Args:
            x: Easting in the shared planar CRS
            y: Northing in the shared planar CRS

        Returns:
            A tuple of (district aggregate or None, resolution details)
        """
        if self._last_result is None:
            return (None, Resolution(district_name=None))

        usable = [d for d in self._last_result.districts if d.boundary is not None]
        resolution = self.resolver.resolve(Point(x, y), usable)
        if not resolution.is_resolved():
            return (None, resolution)
        return (self._last_result.district(resolution.district_name), resolution)

    def _snapshot_districts(
        self,
        districts: Sequence[District],
    ) -> tuple[list[District], dict[str, str]]:
        """Splits districts into a usable snapshot and failed name -> reason."""
        usable: list[District] = []
        failed: dict[str, str] = {}
        seen: set[str] = set()

        for district in districts:
            if district.name in seen:
                logger.warning("Ignoring duplicate district %s", district.name)
                continue
            seen.add(district.name)
            try:
                self.geometry.validate_boundary(district.name, district.boundary)
            except MalformedGeometryError as e:
                failed[district.name] = e.reason
                logger.warning("Skipping district this cycle: %s", e)
                continue
            # Fresh record so the caller's district objects are never written to
            usable.append(District(name=district.name, boundary=district.boundary))

        if not usable:
            raise MalformedInputError(
                f"no usable district boundary among {len(districts)} district(s)"
            )
        return usable, failed

    def _prepare_stations(
        self,
        readings: Iterable[PollutantReading],
        stations: Sequence[Station],
        dropped: list[DroppedRecord],
    ) -> list[Station]:
        """Validates inputs and builds fresh stations owning their readings."""
        prepared: dict[str, Station] = {}
        for station in stations:
            station_id = str(station.station_id).strip() if station.station_id is not None else ""
            if not station_id:
                dropped.append(DroppedRecord(MISSING_IDENTITY, None, f"station {station.name!r} has no station_id"))
                continue
            if station_id in prepared:
                dropped.append(DroppedRecord(DUPLICATE_STATION, station_id, "station_id appears more than once"))
                continue
            prepared[station_id] = Station(
                station_id=station_id,
                name=station.name,
                location=station.location,
            )
            # Readings already attached to a station belong to it
            for reading in station.readings:
                if self._accept_reading(reading, dropped):
                    prepared[station_id].readings.append(reading)

        for reading in readings:
            if not self._accept_reading(reading, dropped):
                continue
            station = prepared.get(str(reading.station_id).strip())
            if station is None:
                dropped.append(DroppedRecord(UNKNOWN_STATION, reading.station_id, "no station metadata for reading"))
                continue
            station.readings.append(reading)

        return list(prepared.values())

    @staticmethod
    def _accept_reading(reading: PollutantReading, dropped: list[DroppedRecord]) -> bool:
        valid, reason = reading.validate()
        if not valid:
            kind = INVALID_VALUE if reading.has_identity() else MISSING_IDENTITY
            dropped.append(DroppedRecord(kind, reading.station_id, reason))
        return valid

    def _run_cycle(
        self,
        readings: Iterable[PollutantReading],
        stations: Sequence[Station],
        districts: Sequence[District],
        fallback: Optional[FallbackReading],
        extra_dropped: list[DroppedRecord],
    ) -> AggregationResult:
        # Step 1: District snapshot (read-only for the rest of the cycle)
        snapshot, failed = self._snapshot_districts(districts)

        # Step 2: Validate inputs and group readings by station
        dropped = list(extra_dropped)
        cycle_stations = self._prepare_stations(readings, stations, dropped)
        for record in dropped:
            logger.warning("Dropped %s record (station %s): %s", record.kind, record.station_id, record.detail)

        # Step 3: Station aggregation, independent per station
        parallel = Parallel(n_jobs=self.settings.n_jobs, prefer="threads")
        aggregates = parallel(
            delayed(self.station_aggregator.aggregate_station)(station, fallback)
            for station in cycle_stations
        )
        for station, aggregate in zip(cycle_stations, aggregates):
            StationAggregator.apply(station, aggregate)

        # Step 4: District resolution, independent per station
        resolutions = parallel(
            delayed(self.resolver.resolve)(station.location, snapshot)
            for station in cycle_stations
        )

        # Barrier: district aggregation needs the complete mapping
        mappings: list[StationDistrictMapping] = []
        unresolved: list[str] = []
        for station, resolution in zip(cycle_stations, resolutions):
            if resolution.is_resolved():
                station.district_name = resolution.district_name
                mappings.append(StationDistrictMapping(station.station_id, resolution.district_name, resolution.tier))
            else:
                unresolved.append(station.station_id)
                logger.warning(
                    "Station %s is not within %.0f m of any district",
                    station.station_id, self.resolver.max_distance,
                )

        # Step 5: District aggregation
        aggregated = {
            district.name: district
            for district in self.district_aggregator.aggregate(snapshot, cycle_stations, mappings)
        }

        # Failed districts keep their previous aggregate, if there is one
        previous = {}
        if self._last_result is not None:
            previous = {district.name: district for district in self._last_result.districts}

        result_districts: list[District] = []
        for district in districts:
            if district.name in aggregated:
                result_districts.append(aggregated.pop(district.name))
            elif district.name in failed and district.name in previous:
                result_districts.append(previous.pop(district.name))
                logger.info("District %s keeps its previous aggregate", district.name)

        report = CycleReport(
            dropped_records=dropped,
            needs_fallback=[s.station_id for s in cycle_stations if s.needs_fallback],
            unresolved_stations=unresolved,
            synthetic_districts=[d.name for d in result_districts if d.synthetic and d.name not in failed],
            failed_districts=failed,
            complete_stations=sum(1 for s in cycle_stations if s.is_complete()),
            incomplete_stations=sum(
                1 for s in cycle_stations if s.index_value is not None and not s.is_complete()
            ),
        )

        logger.info(
            "Aggregation cycle finished: %d stations (%d unresolved), %d districts (%d synthetic, %d failed)",
            len(cycle_stations), len(unresolved), len(result_districts),
            len(report.synthetic_districts), len(failed),
        )

        return AggregationResult(
            timestamp=datetime.now(),
            stations=cycle_stations,
            districts=result_districts,
            mappings=mappings,
            report=report,
        )

    def _ensure_log_file_exists(self) -> None:
        """Create log directory and file header if needed."""
        self.settings.log_dir.mkdir(parents=True, exist_ok=True)

        if not self.log_file.exists():
            with open(self.log_file, 'w', encoding='utf-8') as f:
                f.write("# District AQI Aggregation Log\n")
                f.write("# Format: [TIMESTAMP] STATIONS | DISTRICTS | DROPPED | WORST DISTRICT\n")
                f.write("# " + "=" * 80 + "\n\n")

    def _log_cycle(self, result: AggregationResult) -> None:
        """
        Append a one-line summary of a completed cycle to the persistent log.

        Args:
            result: The completed cycle result
        """
        report = result.report
        worst = result.worst_district()
        if worst is not None:
            worst_str = f"{worst.name} {worst.index_value:.2f} ({worst.category.label})"
        else:
            worst_str = "None"

        stations_str = (
            f"{len(result.stations)} stations "
            f"(complete {report.complete_stations}, fallback {len(report.needs_fallback)}, "
            f"unresolved {len(report.unresolved_stations)})"
        )
        districts_str = (
            f"{len(result.districts)} districts "
            f"(synthetic {len(report.synthetic_districts)}, failed {len(report.failed_districts)})"
        )

        try:
            self._ensure_log_file_exists()
            with open(self.log_file, 'a', encoding='utf-8') as f:
                timestamp_str = result.timestamp.strftime("%Y-%m-%d %H:%M:%S")
                f.write(
                    f"[{timestamp_str}] {stations_str} | {districts_str} | "
                    f"Dropped: {len(report.dropped_records):3d} | Worst: {worst_str}\n"
                )
        except OSError as e:
            # The published result must not depend on the log file
            logger.error("Could not write aggregation log %s: %s", self.log_file, e)
