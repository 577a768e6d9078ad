from players import Player, PlayerRegistry


def test_join_places_player_at_origin():
    players = PlayerRegistry("r1")
    player = players.join("alice", "#ff0000")
    assert player == Player(id="alice", x=0.0, y=0.0, z=0.0, colorHex="#ff0000", coins=0)
    assert "alice" in players
    assert len(players) == 1


def test_join_with_reused_id_overwrites():
    players = PlayerRegistry("r1")
    players.join("alice", 1)
    players.apply_state("alice", 4, 5, 6, 1, 9)
    players.join("alice", 2)
    assert players.get("alice").colorHex == 2
    assert players.get("alice").coins == 0
    assert len(players) == 1


def test_apply_state_replaces_wholesale():
    players = PlayerRegistry("r1")
    players.join("alice", 0xff0000)
    updated = players.apply_state("alice", 10.5, 1.0, -3.25, 0x00ff00, 4)
    assert updated.to_dict() == {"id": "alice", "x": 10.5, "y": 1.0, "z": -3.25, "colorHex": 0x00ff00, "coins": 4}
    assert players.get("alice") is updated


def test_apply_state_for_unknown_player_is_ignored():
    players = PlayerRegistry("r1")
    assert players.apply_state("ghost", 1, 2, 3, None, 0) is None
    assert len(players) == 0


def test_credit_coin():
    players = PlayerRegistry("r1")
    players.join("alice")
    assert players.credit_coin("alice").coins == 1
    assert players.credit_coin("alice").coins == 2
    assert players.credit_coin("bob") is None
    assert players.credit_coin(None) is None


def test_remove():
    players = PlayerRegistry("r1")
    players.join("alice")
    assert players.remove("alice").id == "alice"
    assert players.remove("alice") is None
    assert players.snapshot() == []
