"""
Aggregation module for the District AQI System.

This module contains the station-level and district-level aggregators and
the worst-case selection they share.
"""

from .selection import worst_of
from .station_aggregator import StationAggregate, StationAggregator
from .district_aggregator import DistrictAggregator

__all__ = ['worst_of', 'StationAggregate', 'StationAggregator', 'DistrictAggregator']
