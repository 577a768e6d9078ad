import random
import pytest

from coins import CoinRegistry


@pytest.fixture()
def respawned():
    return []


@pytest.fixture()
def coins(loop, respawned):
    return CoinRegistry("r1", count=32, respawn_delay_ms=10, world_bound=140,
                        on_respawn=respawned.append, loop=loop, rng=random.Random(7))


def test_coins_allocated_active_within_bounds(coins):
    assert sorted(coins.coins) == list(range(32))
    for coin in coins.coins.values():
        assert coin.active
        assert coin.pending_respawn is None
        assert -140 <= coin.x <= 140
        assert -140 <= coin.z <= 140
    assert coins.active_count == 32


def test_collect_active_coin_schedules_one_respawn(coins):
    coin = coins.collect(3)
    assert coin is not None and coin.id == 3
    assert not coin.active
    assert list(coins.pending_respawns()) == [("r1", 3)]
    assert coins.active_count == 31


def test_second_collect_before_respawn_is_noop(coins):
    coins.collect(3)
    handle = coins.get(3).pending_respawn

    assert coins.collect(3) is None
    assert coins.get(3).pending_respawn is handle
    assert not handle.cancelled()
    assert len(coins.pending_respawns()) == 1


def test_collect_unknown_coin_is_noop(coins):
    assert coins.collect(99) is None
    assert coins.collect("3") is None
    assert coins.pending_respawns() == {}


def test_respawn_reactivates_with_fresh_position(coins, respawned, run_for):
    coins.collect(5)
    run_for(0.05)

    coin = coins.get(5)
    assert coin.active
    assert coin.pending_respawn is None
    assert respawned == [coin]
    assert -140 <= coin.x <= 140 and -140 <= coin.z <= 140


def test_reschedule_replaces_pending_timer(coins, respawned, run_for):
    coins.collect(1)
    first = coins.get(1).pending_respawn
    assert coins.schedule_respawn(1)
    second = coins.get(1).pending_respawn

    assert first.cancelled()
    assert second is not first
    run_for(0.05)
    assert len(respawned) == 1


def test_schedule_unknown_coin(coins):
    assert not coins.schedule_respawn(42)


def test_cancel_all_prevents_respawn(coins, respawned, run_for):
    coins.collect(0)
    coins.collect(1)
    assert coins.cancel_all() == 2
    assert coins.pending_respawns() == {}

    run_for(0.05)
    assert respawned == []
    assert not coins.get(0).active
    # a closed registry no longer hands out coins
    assert coins.collect(2) is None


def test_respawn_positions_stay_in_tiny_world(loop, run_for):
    seen = []
    coins = CoinRegistry("tiny", count=4, respawn_delay_ms=1, world_bound=2,
                         on_respawn=lambda coin: seen.append((coin.x, coin.z)),
                         loop=loop, rng=random.Random(3))
    for _ in range(25):
        for coin_id in range(4):
            coins.collect(coin_id)
        run_for(0.02)
    assert len(seen) == 100
    for x, z in seen:
        assert -2 <= x <= 2
        assert -2 <= z <= 2
