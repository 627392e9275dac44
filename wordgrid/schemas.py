from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from uuid import uuid4

from .board import BoardState, empty_board_state

GameStatus = Literal['waiting', 'active']
Table = Literal['games', 'players', 'live_placements']
ChangeKind = Literal['insert', 'update', 'delete']
FeedStatus = Literal['subscribed', 'closed', 'error']
ConnectionStatus = Literal['connected', 'disconnected']

class Position(BaseModel):
    x: int
    y: int

class GameRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    board_state: BoardState = Field(default_factory=empty_board_state)
    current_player_id: Optional[str] = None
    status: GameStatus = 'waiting'
    last_played_positions: List[Position] = []
    # Store-wide write counter at the last write of this row
    revision: int = 0

class PlayerRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    game_id: str
    name: str
    score: int = 0
    rack: List[str] = []
    order_num: int
    revision: int = 0

class LivePlacementRecord(BaseModel):
    game_id: str
    player_id: str
    x: int
    y: int
    letter: str

    @property
    def key(self) -> tuple:
        return (self.game_id, self.player_id, self.x, self.y)

class BonusTile(BaseModel):
    letter: str
    # 0 = blank bonus (no score effect)
    multiplier: Literal[0, 2, 3]

class ChangeEvent(BaseModel):
    table: Table
    kind: ChangeKind
    game_id: str
    row: Optional[Dict[str, Any]] = None
    revision: int

class GameSnapshot(BaseModel):
    game: GameRecord
    players: List[PlayerRecord] = []
