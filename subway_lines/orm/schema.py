"""ORM Schema definitions for subway_lines.

Defines the three mapped tables of the subway network:

- Station: a named stop, unique by name.
- Line: a named, colored route owning an ordered list of LineStation rows.
- LineStation: one edge of a line, linking a station to its predecessor
  with the distance between them.

Example:
    from subway_lines.orm.schema import Line, Station

    sindorim = Station.create("신도림역")
    line = Line.create("2호선", "GREEN")
    line.add_line_station(sindorim, None, None)
"""


from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from subway_lines.exceptions import EmptyNameError, InvalidLineStationError

# SQLite only auto-increments INTEGER PRIMARY KEY columns
IdType = BigInteger().with_variant(Integer, "sqlite")


def _clean_name(entity_name: str, name: str) -> str:
    if name is None or not name.strip():
        raise EmptyNameError(entity_name)
    return name.strip()


class Base(DeclarativeBase):
    pass


class Station(Base):
    """Station table for subway stops"""

    __tablename__ = "station"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    @classmethod
    def create(cls, name: str) -> "Station":
        """Create a new, not yet persisted station.

        Args:
            name: Station name. Surrounding whitespace is stripped.

        Returns:
            The new Station instance.

        Raises:
            EmptyNameError: If the name is blank.
        """
        return cls(name=_clean_name("Station", name))

    def __repr__(self) -> str:
        return f"Station(id={self.id!r}, name={self.name!r})"


class Line(Base):
    """Line table for subway routes"""

    __tablename__ = "line"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    color: Mapped[str | None] = mapped_column(String(64))

    # Relationships
    line_stations: Mapped[list["LineStation"]] = relationship(
        back_populates="line",
        cascade="all, delete-orphan",
        order_by="LineStation.position",
        collection_class=ordering_list("position"),
    )

    @classmethod
    def create(cls, name: str, color: str | None = None) -> "Line":
        """Create a new, not yet persisted line without stations.

        Args:
            name: Line name. Surrounding whitespace is stripped.
            color: Display color of the line.

        Returns:
            The new Line instance.

        Raises:
            EmptyNameError: If the name is blank.
        """
        return cls(name=_clean_name("Line", name), color=color)

    def add_line_station(
        self,
        station: Station,
        previous_station: Station | None = None,
        distance: int | None = None,
    ) -> "LineStation":
        """Append a station link to the end of this line.

        The first stop of a line has neither a previous station nor a distance.
        Every other link carries both.

        Args:
            station: The station being added.
            previous_station: The station before it on the line.
            distance: Distance from the previous station. Must be positive.

        Returns:
            The appended LineStation.

        Raises:
            InvalidLineStationError: If only one of previous_station and distance
                is given, or distance is not positive.
        """
        if (previous_station is None) != (distance is None):
            raise InvalidLineStationError("previous station and distance must be given together")
        if distance is not None and distance <= 0:
            raise InvalidLineStationError(f"distance must be positive, got {distance}")

        line_station = LineStation(station=station, previous_station=previous_station, distance=distance)
        self.line_stations.append(line_station)
        return line_station

    def remove_station(self, station: Station) -> bool:
        """Remove the link for a station from this line.

        The orphaned LineStation row is deleted on the next flush.

        Returns:
            True if a link was removed, False if the station is not on this line.
        """
        for line_station in self.line_stations:
            if line_station.station is station:
                self.line_stations.remove(line_station)
                return True
        return False

    def update_name(self, name: str) -> None:
        """Rename the line in place. Uniqueness is checked when the change is flushed."""
        self.name = _clean_name("Line", name)

    def update_color(self, color: str | None) -> None:
        self.color = color

    @property
    def stations(self) -> list[Station]:
        """Stations of this line in order."""
        return [line_station.station for line_station in self.line_stations]

    def __repr__(self) -> str:
        return f"Line(id={self.id!r}, name={self.name!r}, color={self.color!r})"


class LineStation(Base):
    """Edge table linking a station to its predecessor on a line"""

    __tablename__ = "line_station"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    line_id: Mapped[int] = mapped_column(IdType, ForeignKey("line.id", ondelete="CASCADE"), nullable=False)
    station_id: Mapped[int] = mapped_column(IdType, ForeignKey("station.id"), nullable=False)
    previous_station_id: Mapped[int | None] = mapped_column(IdType, ForeignKey("station.id"), nullable=True)
    distance: Mapped[int | None] = mapped_column(Integer, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(previous_station_id IS NULL) = (distance IS NULL)",
            name="check_previous_station_with_distance",
        ),
        CheckConstraint("distance IS NULL OR distance > 0", name="check_distance_positive"),
    )

    # Relationships
    line: Mapped["Line"] = relationship(back_populates="line_stations")
    station: Mapped["Station"] = relationship(foreign_keys=[station_id])
    previous_station: Mapped["Station | None"] = relationship(foreign_keys=[previous_station_id])

    def __repr__(self) -> str:
        return (
            f"LineStation(line_id={self.line_id!r}, station_id={self.station_id!r}, "
            f"previous_station_id={self.previous_station_id!r}, distance={self.distance!r})"
        )


__all__ = ["Base", "Line", "LineStation", "Station"]
