from __future__ import annotations
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

BLANK = '_'

GamePhase = Literal['lobby', 'playing', 'ended']
EndReason = Literal['allTilesPlayed', 'consecutivePasses', 'allPlayersDisconnected']

class Tile(BaseModel):
    model_config = ConfigDict(frozen=True)

    # 'A'-'Z', or '_' for a blank still on a rack; a blank on the board may carry its assigned letter
    letter: str
    points: int = 0
    isBlank: bool = False

class Placement(BaseModel):
    row: int
    col: int
    tile: Tile

class PlayerState(BaseModel):
    id: str
    name: str
    score: int = 0
    rack: List[Tile] = []
    isConnected: bool = True
    isHost: bool = False

class PublicPlayer(BaseModel):
    id: str
    name: str
    score: int = 0
    rackCount: int = 0
    isConnected: bool = True
    isHost: bool = False

    @classmethod
    def of(cls, player: PlayerState) -> PublicPlayer:
        return cls(
            id=player.id,
            name=player.name,
            score=player.score,
            rackCount=len(player.rack),
            isConnected=player.isConnected,
            isHost=player.isHost,
        )

class PlayRecord(BaseModel):
    playerId: str
    words: List[str] = []
    score: int = 0
    placements: List[Placement] = []
    timestamp: datetime = Field(default_factory=datetime.now)

class FinalScore(BaseModel):
    playerId: str
    playerName: str
    score: int
    remainingTilePoints: int = 0

class Winner(BaseModel):
    playerId: str
    playerName: str
    score: int

class GameEndResult(BaseModel):
    reason: EndReason
    finalScores: List[FinalScore]
    winner: Winner

class GameStateView(BaseModel):
    id: str
    phase: GamePhase = 'lobby'
    players: List[PublicPlayer] = []
    board: List[List[Optional[Tile]]] = []
    currentPlayerId: Optional[str] = None
    bagCount: int = 0
    consecutivePasses: int = 0
    lastMove: Optional[PlayRecord] = None

# Client intents

class JoinGameRequest(BaseModel):
    playerName: str
    gameId: Optional[str] = None

class SubmitWordRequest(BaseModel):
    placements: List[Placement]

class ExchangeTilesRequest(BaseModel):
    tileIndices: List[int]
