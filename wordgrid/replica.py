from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .board import Board
from .schemas import GameRecord, GameStatus, LivePlacementRecord, PlayerRecord, Position

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class GameChanged:
    game: GameRecord
    revision: int

@dataclass(frozen=True)
class PlayersChanged:
    players: List[PlayerRecord]
    revision: int

@dataclass(frozen=True)
class PlacementsChanged:
    placements: List[LivePlacementRecord]
    revision: int

FeedEvent = Union[GameChanged, PlayersChanged, PlacementsChanged]

@dataclass(frozen=True)
class Reduction:
    applied: bool
    turn_changed: bool = False
    previous_turn: Optional[str] = None

@dataclass
class Replica:
    game_id: Optional[str] = None
    player_id: Optional[str] = None
    board: Board = field(default_factory=Board)
    current_turn: Optional[str] = None
    status: GameStatus = 'waiting'
    players: List[PlayerRecord] = field(default_factory=list)
    live_placements: List[LivePlacementRecord] = field(default_factory=list)
    last_played_positions: List[Position] = field(default_factory=list)
    revisions: Dict[str, int] = field(default_factory=dict)

    @property
    def is_my_turn(self) -> bool:
        return self.player_id is not None and self.current_turn == self.player_id

    @property
    def me(self) -> Optional[PlayerRecord]:
        return next((p for p in self.players if p.id == self.player_id), None)

    @property
    def player_ids(self) -> List[str]:
        return [p.id for p in self.players]

    def reset(self) -> None:
        self.game_id = None
        self.player_id = None
        self.board = Board()
        self.current_turn = None
        self.status = 'waiting'
        self.players = []
        self.live_placements = []
        self.last_played_positions = []
        self.revisions = {}

    def _is_stale(self, slice_name: str, revision: int) -> bool:
        return revision < self.revisions.get(slice_name, -1)

def apply_event(replica: Replica, event: FeedEvent) -> Reduction:
    """Apply one feed event; an event older than its slice is dropped, anything else replaces the slice."""
    if isinstance(event, GameChanged):
        if replica._is_stale('game', event.revision):
            logger.debug('Dropping stale game update at revision %s', event.revision)
            return Reduction(applied=False)
        game = event.game
        previous = replica.current_turn
        replica.board = Board(game.board_state)
        replica.current_turn = game.current_player_id
        replica.status = game.status
        replica.last_played_positions = list(game.last_played_positions)
        replica.revisions['game'] = event.revision
        return Reduction(
            applied=True,
            turn_changed=previous != game.current_player_id,
            previous_turn=previous,
        )

    if isinstance(event, PlayersChanged):
        if replica._is_stale('players', event.revision):
            logger.debug('Dropping stale players update at revision %s', event.revision)
            return Reduction(applied=False)
        replica.players = sorted(event.players, key=lambda p: p.order_num)
        replica.revisions['players'] = event.revision
        return Reduction(applied=True)

    if isinstance(event, PlacementsChanged):
        if replica._is_stale('placements', event.revision):
            logger.debug('Dropping stale live placements at revision %s', event.revision)
            return Reduction(applied=False)
        replica.live_placements = list(event.placements)
        replica.revisions['placements'] = event.revision
        return Reduction(applied=True)

    raise TypeError(f'Unknown feed event: {event!r}')
