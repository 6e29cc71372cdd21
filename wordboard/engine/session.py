from __future__ import annotations
import random
from typing import List, Optional

from ..schemas import GameEndResult, GamePhase, GameStateView, PlayerState, PlayRecord, PublicPlayer, Tile
from .board import Board, empty_board

class GameSession:
    """Everything one game owns. Operations on it are serialized by the caller."""

    def __init__(self, game_id: str, rng: Optional[random.Random] = None):
        self.id = game_id
        self.rng = rng or random.Random()
        self.phase: GamePhase = 'lobby'
        self.board: Board = empty_board()
        self.players: List[PlayerState] = []
        self.current_idx: int = 0
        self.tile_bag: List[Tile] = []
        self.consecutive_passes: int = 0
        self.history: List[PlayRecord] = []
        self.end_result: Optional[GameEndResult] = None

    @property
    def current_player(self) -> Optional[PlayerState]:
        if not self.players:
            return None
        return self.players[self.current_idx % len(self.players)]

    def find_player(self, player_id: str) -> Optional[PlayerState]:
        return next((p for p in self.players if p.id == player_id), None)

    def to_state(self) -> GameStateView:
        current = self.current_player if self.phase == 'playing' else None
        return GameStateView(
            id=self.id,
            phase=self.phase,
            players=[PublicPlayer.of(p) for p in self.players],
            board=[list(row) for row in self.board],
            currentPlayerId=current.id if current else None,
            bagCount=len(self.tile_bag),
            consecutivePasses=self.consecutive_passes,
            lastMove=self.history[-1] if self.history else None,
        )
