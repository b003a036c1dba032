import json

import pytest

from geocoin.cache import CacheRegistry, decode_tokens, encode_tokens
from geocoin.coins import CoinToken
from geocoin.errors import CacheAlreadyGenerated, SnapshotValidationError


def test_get_or_create_returns_same_record():
    reg = CacheRegistry()
    first = reg.get_or_create(-7, 12)
    second = reg.get_or_create(-7, 12)
    assert first is second
    assert len(reg) == 1
    assert first.tokens == []
    assert not first.generated


def test_get_does_not_create():
    reg = CacheRegistry()
    assert reg.get(1, 1) is None
    assert len(reg) == 0


def test_generate_uses_initial_coins_key(fake_luck):
    luck = fake_luck({"2,-3,initialCoins": 0.35})
    reg = CacheRegistry()
    tokens = reg.generate(2, -3, luck)
    assert [t.id for t in tokens] == ["2:-3#0", "2:-3#1", "2:-3#2"]
    assert luck.calls == ["2,-3,initialCoins"]
    assert reg.get_cache(2, -3) == tokens
    assert reg.is_generated(2, -3)


def test_generate_twice_is_refused(fake_luck):
    reg = CacheRegistry()
    luck = fake_luck({"0,0,initialCoins": 0.5})
    reg.generate(0, 0, luck)
    reg.save(0, 0, [])
    with pytest.raises(CacheAlreadyGenerated):
        reg.generate(0, 0, luck)
    assert reg.get_cache(0, 0) == []


def test_generated_ids_unique_across_cells(fake_luck):
    reg = CacheRegistry()
    luck = fake_luck(default=0.95)
    ids = []
    for i in range(-3, 3):
        for j in range(-3, 3):
            ids.extend(t.id for t in reg.generate(i, j, luck))
    assert len(ids) == 36 * 9
    assert len(set(ids)) == len(ids)


def test_regrow_never_reuses_serials(fake_luck):
    reg = CacheRegistry()
    luck = fake_luck({"1,1,initialCoins": 0.2})
    first = reg.generate(1, 1, luck)
    reg.save(1, 1, [])
    fresh = reg.regrow(1, 1, luck)
    assert [t.serial for t in first] == [0, 1]
    assert [t.serial for t in fresh] == [2, 3]
    assert reg.get(1, 1).next_serial == 4


def test_save_replaces_with_copy():
    reg = CacheRegistry()
    coins = [CoinToken(0, 0, 0)]
    reg.save(0, 0, coins)
    coins.append(CoinToken(0, 0, 1))
    assert reg.get_cache(0, 0) == [CoinToken(0, 0, 0)]


def test_serialize_round_trip_keeps_order():
    reg = CacheRegistry()
    coins = [CoinToken(5, 5, 2), CoinToken(1, -1, 0), CoinToken(5, 5, 0)]
    reg.save(5, 5, coins)
    text = reg.serialize(5, 5)
    assert json.loads(text) == [t.to_dict() for t in coins]

    other = CacheRegistry()
    other.deserialize(5, 5, text)
    assert other.get_cache(5, 5) == coins
    assert other.is_generated(5, 5)
    assert other.get(5, 5).next_serial == 3


def test_empty_cache_serializes_to_empty_list():
    assert encode_tokens([]) == "[]"
    assert decode_tokens("[]") == []


@pytest.mark.parametrize("text", ["", "{", '{"i": 1}', '[{"i": 1, "j": 2}]', "[1, 2]"])
def test_deserialize_rejects_malformed(text):
    reg = CacheRegistry()
    with pytest.raises(SnapshotValidationError):
        reg.deserialize(0, 0, text)
    assert reg.get(0, 0) is None


def test_records_iterate_in_creation_order():
    reg = CacheRegistry()
    reg.get_or_create(3, 3)
    reg.get_or_create(-1, 0)
    reg.get_or_create(3, 3)
    assert [r.key for r in reg.records()] == ["3,3", "-1,0"]
    assert (3, 3) in reg
