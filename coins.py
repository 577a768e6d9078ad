import asyncio
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Coin:
    id: int
    x: int
    z: int
    active: bool = True
    pending_respawn: Optional[asyncio.TimerHandle] = field(default=None, repr=False, compare=False)

    def to_dict(self):
        return {"id": self.id, "x": self.x, "z": self.z, "active": self.active}


class CoinRegistry:
    """Coins of one room and their respawn timers.

    Each coin cycles Active -> Collected -> (respawn delay) -> Active. Timers
    are plain ``loop.call_later`` handles kept on the coin itself, so every
    pending respawn can be enumerated as ``(room_name, coin_id)`` and
    cancelled when the room goes away.
    """

    def __init__(
        self,
        room_name: str,
        count: int,
        respawn_delay_ms: int,
        world_bound: int,
        on_respawn: Callable[[Coin], None],
        loop: Optional[asyncio.AbstractEventLoop] = None,
        rng: Optional[random.Random] = None,
    ):
        self.room_name = room_name
        self.respawn_delay_ms = respawn_delay_ms
        self.world_bound = world_bound
        self._on_respawn = on_respawn
        self._loop = loop
        self._rng = rng or random.Random()
        self._closed = False
        self.coins: Dict[int, Coin] = {}
        for coin_id in range(count):
            x, z = self.random_position()
            self.coins[coin_id] = Coin(id=coin_id, x=x, z=z)

    def random_position(self) -> Tuple[int, int]:
        bound = self.world_bound
        return self._rng.randint(-bound, bound), self._rng.randint(-bound, bound)

    def get(self, coin_id) -> Optional[Coin]:
        return self.coins.get(coin_id)

    def collect(self, coin_id) -> Optional[Coin]:
        """Deactivate an active coin and arm its respawn.

        Returns the coin when this call collected it, None when the coin is
        unknown or already collected. Only the first claim in a cycle counts.
        """
        coin = self.coins.get(coin_id)
        if coin is None or not coin.active or self._closed:
            return None
        coin.active = False
        self._cancel_timer(coin)
        self.schedule_respawn(coin_id)
        return coin

    def schedule_respawn(self, coin_id) -> bool:
        coin = self.coins.get(coin_id)
        if coin is None or self._closed:
            return False
        self._cancel_timer(coin)
        loop = self._loop or asyncio.get_running_loop()
        coin.pending_respawn = loop.call_later(self.respawn_delay_ms / 1000.0, self._respawn, coin_id)
        logger.debug(f"Coin {coin_id} in room {self.room_name} respawns in {self.respawn_delay_ms}ms")
        return True

    def _respawn(self, coin_id):
        coin = self.coins.get(coin_id)
        if coin is None or self._closed:
            return
        coin.x, coin.z = self.random_position()
        coin.active = True
        coin.pending_respawn = None
        logger.debug(f"Coin {coin_id} respawned in room {self.room_name} at ({coin.x}, {coin.z})")
        self._on_respawn(coin)

    def _cancel_timer(self, coin: Coin):
        if coin.pending_respawn is not None:
            coin.pending_respawn.cancel()
            coin.pending_respawn = None

    def pending_respawns(self) -> Dict[Tuple[str, int], asyncio.TimerHandle]:
        return {
            (self.room_name, coin.id): coin.pending_respawn
            for coin in self.coins.values()
            if coin.pending_respawn is not None
        }

    def cancel_all(self) -> int:
        """Cancel every pending respawn and refuse further scheduling."""
        pending = self.pending_respawns()
        for (_, coin_id), handle in pending.items():
            handle.cancel()
            self.coins[coin_id].pending_respawn = None
        self._closed = True
        if pending:
            logger.debug(f"Cancelled {len(pending)} respawn timers in room {self.room_name}")
        return len(pending)

    @property
    def active_count(self) -> int:
        return sum(1 for c in self.coins.values() if c.active)

    def snapshot(self):
        return [c.to_dict() for c in self.coins.values()]

    def __len__(self):
        return len(self.coins)
