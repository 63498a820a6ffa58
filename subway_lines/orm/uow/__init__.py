"""Unit of Work (UoW) pattern implementations for subway_lines.

Provides transaction management and repository coordination:
- BaseUnitOfWork: Abstract base class with common patterns
- SubwayUnitOfWork: For line and station persistence
"""

from subway_lines.orm.uow.base import BaseUnitOfWork
from subway_lines.orm.uow.subway_uow import SubwayUnitOfWork

__all__ = [
    "BaseUnitOfWork",
    "SubwayUnitOfWork",
]
