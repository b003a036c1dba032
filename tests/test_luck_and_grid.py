import pytest

from geocoin.grid import Cell, LatLng, cell_bounds, cell_for, neighborhood
from geocoin.luck import HashLuck, cell_key


def test_cell_keys_match_original_format():
    assert cell_key(2, -3) == "2,-3"
    assert cell_key(2, -3, "initialCoins") == "2,-3,initialCoins"


def test_hash_luck_is_deterministic_and_in_range():
    a = HashLuck("seed")
    b = HashLuck("seed")
    values = [a(cell_key(i, j)) for i in range(20) for j in range(20)]
    assert values == [b(cell_key(i, j)) for i in range(20) for j in range(20)]
    assert all(0.0 <= v < 1.0 for v in values)
    assert len(set(values)) == len(values)


def test_hash_luck_depends_on_seed():
    keys = [cell_key(i, 0) for i in range(10)]
    assert [HashLuck("a")(k) for k in keys] != [HashLuck("b")(k) for k in keys]


def test_hash_luck_spawn_rate_is_plausible():
    luck = HashLuck("")
    hits = sum(luck(cell_key(i, j)) < 0.1 for i in range(100) for j in range(100))
    assert 800 < hits < 1200


def test_cell_for_handles_negative_coordinates():
    assert cell_for(LatLng(36.98949379578401, -122.06277128548504), 1e-4) == Cell(369894, -1220628)
    assert cell_for(LatLng(-0.00005, 0.00005), 1e-4) == Cell(-1, 0)
    with pytest.raises(ValueError):
        cell_for(LatLng(0, 0), 0)


def test_cell_bounds_and_key():
    sw, ne = cell_bounds(Cell(2, -3), 0.5)
    assert sw == LatLng(1.0, -1.5)
    assert ne == LatLng(1.5, -1.0)
    assert Cell.from_key("2,-3") == Cell(2, -3)
    with pytest.raises(ValueError):
        Cell.from_key("2;-3")


def test_neighborhood_is_square_around_center():
    cells = list(neighborhood(Cell(0, 0), 2))
    assert len(cells) == 16
    assert cells[0] == Cell(-2, -2)
    assert cells[-1] == Cell(1, 1)
