import pytest

from fieldreport.imaging.models import Gravity, Layer, resolve_position

BASE = (2000, 2667)
STAMP = (800, 330)


class TestResolvePosition:
    def test_explicit_offsets_are_left_top(self) -> None:
        layer = Layer(data=b"", top=82, left=586)
        assert resolve_position(BASE, STAMP, layer) == (586, 82)

    @pytest.mark.parametrize(
        ("gravity", "expected"),
        [
            (Gravity.NORTHWEST, (0, 0)),
            (Gravity.NORTHEAST, (1200, 0)),
            (Gravity.SOUTHWEST, (0, 2337)),
            (Gravity.SOUTHEAST, (1200, 2337)),
            (Gravity.CENTRE, (600, 1168)),
        ],
    )
    def test_gravity_positions(self, gravity: Gravity, expected: tuple[int, int]) -> None:
        layer = Layer(data=b"", gravity=gravity)
        assert resolve_position(BASE, STAMP, layer) == expected

    def test_gravity_ignores_offsets(self) -> None:
        layer = Layer(data=b"", top=10, left=10, gravity=Gravity.SOUTHWEST)
        assert resolve_position(BASE, STAMP, layer) == (0, 2337)
