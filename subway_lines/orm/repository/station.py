"""Station repository for subway_lines."""

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from subway_lines.orm.repository.base import NamedEntityRepository
from subway_lines.orm.schema import Line, LineStation, Station


class StationRepository(NamedEntityRepository[Station]):
    """Repository for Station entity."""

    def __init__(self, session: Session):
        super().__init__(session, Station)

    def find_all(self) -> list[Station]:
        """Retrieve all stations ordered by name."""
        stmt = select(Station).order_by(Station.name)
        return list(self._execute(stmt).scalars().all())

    def find_lines_of(self, station: Station) -> list[Line]:
        """Retrieve the lines that stop at, or lead to, a station.

        Args:
            station: A persisted station.

        Returns:
            Lines referencing the station ordered by id.
        """
        stmt = (
            select(Line)
            .join(Line.line_stations)
            .where(or_(LineStation.station_id == station.id, LineStation.previous_station_id == station.id))
            .order_by(Line.id)
            .distinct()
        )
        return list(self._execute(stmt).scalars().all())
