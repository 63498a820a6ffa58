"""Subway Unit of Work for subway_lines.

Groups the line and station repositories in one transaction.
"""

from sqlalchemy.orm import Session, sessionmaker

from subway_lines.orm.repository.line import LineRepository
from subway_lines.orm.repository.station import StationRepository
from subway_lines.orm.uow.base import BaseUnitOfWork


class SubwayUnitOfWork(BaseUnitOfWork):
    """Unit of Work for line and station transactions.

    Provides lazy-initialized repositories bound to the unit's session.

    Example:
        >>> with SubwayUnitOfWork(session_factory) as uow:
        ...     station = uow.stations.save(Station.create("잠실역"))
        ...     line = Line.create("2호선", "GREEN")
        ...     line.add_line_station(station)
        ...     uow.lines.save(line)
        ...     uow.commit()
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        super().__init__(session_factory)
        self._line_repo: LineRepository | None = None
        self._station_repo: StationRepository | None = None

    def _reset_repositories(self) -> None:
        self._line_repo = None
        self._station_repo = None

    @classmethod
    def available_repositories(cls) -> list[str]:
        return ["lines", "stations"]

    @property
    def lines(self) -> LineRepository:
        """Get the Line repository.

        Raises:
            SessionNotSetError: If session is not initialized.
        """
        return self._get_repository("_line_repo", LineRepository)

    @property
    def stations(self) -> StationRepository:
        """Get the Station repository.

        Raises:
            SessionNotSetError: If session is not initialized.
        """
        return self._get_repository("_station_repo", StationRepository)
