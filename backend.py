import asyncio
import random
from datetime import datetime
from typing import Dict, List, Optional, Set

from broadcast import broadcast, unicast
from coins import Coin, CoinRegistry
from constants import COIN_COUNT, COIN_RESPAWN_MS, WORLD_BOUND
from logging_config import get_logger
from players import Player, PlayerRegistry
from schemas.messages import (
    CoinUpdateEvent,
    InitEvent,
    PlayerJoinedEvent,
    PlayerLeftEvent,
    StateEvent,
)

logger = get_logger(__name__)


class Room:
    """One isolated shard: its live connections, players and coins."""

    def __init__(self, name: str, coin_count: int, respawn_delay_ms: int, world_bound: int,
                 loop: Optional[asyncio.AbstractEventLoop] = None, rng: Optional[random.Random] = None):
        self.name = name
        self.created_at = datetime.now().isoformat()
        self.connections: Set = set()
        # connections that fetched a snapshot and have not joined yet
        self.reservations: Set = set()
        self.players = PlayerRegistry(name)
        self.coins = CoinRegistry(
            name,
            count=coin_count,
            respawn_delay_ms=respawn_delay_ms,
            world_bound=world_bound,
            on_respawn=self._announce_respawn,
            loop=loop,
            rng=rng,
        )

    @property
    def is_empty(self) -> bool:
        return not self.connections and not self.reservations

    def reserve(self, connection):
        self.reservations.add(connection)

    def release(self, connection):
        self.reservations.discard(connection)

    def join(self, connection, player_id: str, color_hex=None) -> Player:
        self.connections.add(connection)
        self.reservations.discard(connection)
        player = self.players.join(player_id, color_hex)
        broadcast(self.connections, PlayerJoinedEvent(id=player.id, x=player.x, y=player.y, z=player.z,
                                                      colorHex=player.colorHex), exclude=connection)
        return player

    def leave(self, connection, player_id: Optional[str]):
        self.connections.discard(connection)
        if player_id is None:
            return
        self.players.remove(player_id)
        broadcast(self.connections, PlayerLeftEvent(id=player_id))

    def snapshot(self) -> InitEvent:
        return InitEvent(coins=self.coins.snapshot(), players=self.players.snapshot())

    def send_snapshot(self, connection) -> bool:
        return unicast(connection, self.snapshot())

    def update_state(self, connection, player_id: str, x, y, z, color_hex, coins) -> Optional[Player]:
        player = self.players.apply_state(player_id, x, y, z, color_hex, coins)
        if player is None:
            return None
        broadcast(self.connections, StateEvent(**player.to_dict()), exclude=connection)
        return player

    def collect_coin(self, coin_id, collector_id: Optional[str]) -> bool:
        coin = self.coins.collect(coin_id)
        if coin is None:
            return False
        broadcast(self.connections, CoinUpdateEvent(id=coin.id, active=False))
        player = self.players.credit_coin(collector_id)
        if player:
            broadcast(self.connections, StateEvent(**player.to_dict()))
        logger.debug(f"Coin {coin.id} collected in room {self.name} by {collector_id}")
        return True

    def _announce_respawn(self, coin: Coin):
        broadcast(self.connections, CoinUpdateEvent(id=coin.id, active=True, x=coin.x, z=coin.z))

    def close(self) -> int:
        return self.coins.cancel_all()


class RoomRegistry:
    """All live rooms of this process, created on first use and dropped when empty."""

    def __init__(self, coin_count: int = COIN_COUNT, respawn_delay_ms: int = COIN_RESPAWN_MS,
                 world_bound: int = WORLD_BOUND, loop: Optional[asyncio.AbstractEventLoop] = None,
                 rng: Optional[random.Random] = None):
        self.coin_count = coin_count
        self.respawn_delay_ms = respawn_delay_ms
        self.world_bound = world_bound
        self._loop = loop
        self._rng = rng
        self._rooms: Dict[str, Room] = {}
        logger.info(f"Initializing RoomRegistry: {coin_count} coins per room, "
                    f"respawn {respawn_delay_ms}ms, world bound {world_bound}")

    def ensure_room(self, name: str) -> Room:
        room = self._rooms.get(name)
        if room is None:
            room = Room(name, self.coin_count, self.respawn_delay_ms, self.world_bound,
                        loop=self._loop, rng=self._rng)
            self._rooms[name] = room
            logger.info(f"Room {name} created with {self.coin_count} coins")
        return room

    def get_room(self, name: str) -> Optional[Room]:
        return self._rooms.get(name)

    def remove_room_if_empty(self, name: str) -> bool:
        room = self._rooms.get(name)
        if room is None or not room.is_empty:
            return False
        del self._rooms[name]
        cancelled = room.close()
        logger.info(f"Room {name} is empty, removed (cancelled {cancelled} respawn timers)")
        return True

    def close_all(self) -> int:
        cancelled = 0
        for name in list(self._rooms):
            cancelled += self._rooms.pop(name).close()
        logger.info(f"Closed all rooms, cancelled {cancelled} respawn timers")
        return cancelled

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, name):
        return name in self._rooms


room_registry = RoomRegistry()
