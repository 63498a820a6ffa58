"""Repository module for subway_lines ORM.

This module provides repository classes for data access layer operations.
"""

from subway_lines.orm.repository.base import GenericRepository, NamedEntityRepository
from subway_lines.orm.repository.line import LineRepository
from subway_lines.orm.repository.station import StationRepository

__all__ = [
    "GenericRepository",
    "LineRepository",
    "NamedEntityRepository",
    "StationRepository",
]
