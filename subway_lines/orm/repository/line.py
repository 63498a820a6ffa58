"""Line repository for subway_lines.

Implements line-specific queries on top of the named-entity repository.
Station links are owned by the line and are saved and deleted with it.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from subway_lines.orm.repository.base import NamedEntityRepository
from subway_lines.orm.schema import Line, LineStation


class LineRepository(NamedEntityRepository[Line]):
    """Repository for the Line aggregate."""

    def __init__(self, session: Session):
        super().__init__(session, Line)

    def find_all(self) -> list[Line]:
        """Retrieve all lines ordered by id."""
        return self.get_all()

    def find_with_stations(self, name: str) -> Line | None:
        """Retrieve a line with its station links and their stations eagerly loaded.

        Args:
            name: The line name.

        Returns:
            The line with stations loaded, None if not found.
        """
        stmt = (
            select(Line)
            .where(Line.name == name)
            .options(
                joinedload(Line.line_stations).joinedload(LineStation.station),
                joinedload(Line.line_stations).joinedload(LineStation.previous_station),
            )
        )
        return self._execute(stmt).unique().scalar_one_or_none()

    def find_by_color(self, color: str) -> list[Line]:
        """Retrieve all lines drawn in the given color.

        Args:
            color: The color to match.

        Returns:
            Lines with that color ordered by id.
        """
        stmt = select(Line).where(Line.color == color).order_by(Line.id)
        return list(self._execute(stmt).scalars().all())

    def count_stations(self, name: str) -> int:
        """Count the stations on a line, 0 if the line does not exist."""
        line = self.find_with_stations(name)
        return len(line.line_stations) if line else 0
