import pytest

from subway_lines.exceptions import EmptyNameError, InvalidLineStationError
from subway_lines.orm.schema import Line, Station


def test_station_create_strips_name():
    assert Station.create("  잠실역 ").name == "잠실역"


@pytest.mark.parametrize("name", ["", "   ", None])
def test_blank_names_rejected(name):
    with pytest.raises(EmptyNameError):
        Station.create(name)
    with pytest.raises(EmptyNameError):
        Line.create(name, "RED")


def test_line_create_has_no_stations():
    line = Line.create("1호선", "BLUE")

    assert line.name == "1호선"
    assert line.color == "BLUE"
    assert line.line_stations == []
    assert line.stations == []


def test_add_line_station_appends_in_order():
    first, second, third = Station.create("신길역"), Station.create("영등포역"), Station.create("신도림역")
    line = Line.create("1호선", "BLUE")

    start = line.add_line_station(first)
    line.add_line_station(second, first, 10)
    line.add_line_station(third, second, 7)

    assert start.previous_station is None
    assert start.distance is None
    assert line.stations == [first, second, third]
    assert [line_station.position for line_station in line.line_stations] == [0, 1, 2]
    assert all(line_station.line is line for line_station in line.line_stations)


@pytest.mark.parametrize(
    ("with_previous", "distance"),
    [(True, None), (False, 5), (True, 0), (True, -3)],
    ids=["missing-distance", "missing-previous", "zero-distance", "negative-distance"],
)
def test_add_line_station_rejects_inconsistent_links(with_previous, distance):
    first, second = Station.create("신길역"), Station.create("영등포역")
    line = Line.create("1호선", "BLUE")

    with pytest.raises(InvalidLineStationError):
        line.add_line_station(second, first if with_previous else None, distance)
    assert line.line_stations == []


def test_update_name_and_color():
    line = Line.create("1호선", "BLUE")

    line.update_name(" 경부선 ")
    line.update_color("NAVY")

    assert line.name == "경부선"
    assert line.color == "NAVY"
    with pytest.raises(EmptyNameError):
        line.update_name("")
    assert line.name == "경부선"


def test_remove_station_reorders_positions():
    first, second, third = Station.create("신길역"), Station.create("영등포역"), Station.create("신도림역")
    line = Line.create("1호선", "BLUE")
    line.add_line_station(first)
    line.add_line_station(second, first, 10)
    line.add_line_station(third, second, 7)

    assert line.remove_station(second) is True

    assert line.stations == [first, third]
    assert [line_station.position for line_station in line.line_stations] == [0, 1]
