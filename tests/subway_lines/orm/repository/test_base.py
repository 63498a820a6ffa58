"""Test cases for GenericRepository.

Covers the shared CRUD helpers through the Station model.
"""

import pytest
from sqlalchemy.orm import Session

from subway_lines.orm.repository.base import GenericRepository
from subway_lines.orm.schema import Station


@pytest.fixture
def generic_repository(db_session: Session) -> GenericRepository[Station]:
    return GenericRepository(db_session, Station)


def test_add_does_not_flush(generic_repository: GenericRepository[Station], db_session: Session):
    station = generic_repository.add(Station.create("시청역"))

    assert station in db_session.new
    assert station.id is None


def test_add_all_then_get_all(generic_repository: GenericRepository[Station], db_session: Session):
    generic_repository.add_all([Station.create(name) for name in ["시청역", "종각역", "종로3가역"]])
    db_session.flush()

    result = generic_repository.get_all()

    assert [station.name for station in result] == ["시청역", "종각역", "종로3가역"]
    assert [station.name for station in generic_repository.get_all(limit=2, offset=1)] == ["종각역", "종로3가역"]
    assert generic_repository.count() == 3


def test_update_merges_detached_entity(generic_repository: GenericRepository[Station], db_session: Session):
    station = generic_repository.save(Station.create("시청역"))
    station_id = station.id
    db_session.expunge(station)

    detached = Station(id=station_id, name="서울시청역")
    merged = generic_repository.update(detached)

    assert merged is not detached
    assert generic_repository.get_by_id(station_id).name == "서울시청역"


def test_get_by_id_missing_returns_none(generic_repository: GenericRepository[Station]):
    assert generic_repository.get_by_id(10_000) is None
    assert generic_repository.exists(10_000) is False
