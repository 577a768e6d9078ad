from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Union

from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Player:
    id: str
    x: Optional[float] = 0.0
    y: Optional[float] = 0.0
    z: Optional[float] = 0.0
    colorHex: Any = None
    coins: Union[int, float] = 0

    def to_dict(self):
        return asdict(self)


class PlayerRegistry:
    """Connected players of one room, keyed by player id.

    Positions are taken from clients as-is; nothing here checks that a move
    or a score is plausible.
    """

    def __init__(self, room_name: str):
        self.room_name = room_name
        self.players: Dict[str, Player] = {}

    def join(self, player_id: str, color_hex=None) -> Player:
        if player_id in self.players:
            logger.debug(f"Player id {player_id} reused in room {self.room_name}, overwriting")
        player = Player(id=player_id, colorHex=color_hex)
        self.players[player_id] = player
        return player

    def apply_state(self, player_id: str, x: float, y: float, z: float, color_hex, coins: int) -> Optional[Player]:
        if player_id not in self.players:
            logger.debug(f"State for unknown player {player_id} in room {self.room_name} ignored")
            return None
        player = Player(id=player_id, x=x, y=y, z=z, colorHex=color_hex, coins=coins or 0)
        self.players[player_id] = player
        return player

    def credit_coin(self, player_id: Optional[str]) -> Optional[Player]:
        player = self.players.get(player_id) if player_id is not None else None
        if not player:
            return None
        player.coins = (player.coins or 0) + 1
        return player

    def remove(self, player_id: str) -> Optional[Player]:
        return self.players.pop(player_id, None)

    def get(self, player_id: str) -> Optional[Player]:
        return self.players.get(player_id)

    def snapshot(self):
        return [p.to_dict() for p in self.players.values()]

    def __len__(self):
        return len(self.players)

    def __contains__(self, player_id):
        return player_id in self.players
