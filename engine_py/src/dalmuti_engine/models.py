"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import List, Optional, Literal, Union

Rank = Union[int, Literal['joker']]

@dataclass(frozen=True)
class Card:
    rank: Rank
    id: str

    @property
    def is_joker(self) -> bool:
        return self.rank == 'joker'

@dataclass
class Player:
    id: str
    name: str
    type: str = 'human'  # human|ai
    cards: List[Card] = field(default_factory=list)
    position: int = 0  # finishing place in the previous game, 0 if none
    is_ready: bool = False
    has_finished: bool = False
    finish_order: Optional[int] = None
    difficulty: str = 'medium'  # only meaningful for AI players
    title: Optional[str] = None

    @property
    def is_ai(self) -> bool:
        return self.type == 'ai'

@dataclass(frozen=True)
class Turn:
    player_id: str
    cards: List[Card]
    timestamp: float

@dataclass
class GameOptions:
    enable_revolution: bool = True
    enable_tax: bool = True
    turn_time_limit: Optional[int] = None  # seconds, None = unlimited

@dataclass(frozen=True)
class TaxRequest:
    from_player_id: str
    to_player_id: str
    card_count: int

@dataclass
class Game:
    room_id: str
    phase: str = 'waiting'  # waiting|tax|playing|finished
    players: List[Player] = field(default_factory=list)
    current_player_index: int = 0
    current_turn: Optional[Turn] = None
    pass_count: int = 0
    turn_history: List[Turn] = field(default_factory=list)
    is_revolution: bool = False
    tax_phase_complete: bool = False
    finished_players: List[str] = field(default_factory=list)
    game_options: GameOptions = field(default_factory=GameOptions)
    turn_start_time: Optional[float] = None
    pending_tax: List[TaxRequest] = field(default_factory=list)
    version: int = 0

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def get_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

@dataclass
class Room:
    id: str
    name: str
    host_id: str
    players: List[Player] = field(default_factory=list)
    max_players: int = 8
    current_game: Optional[Game] = None
    game_options: GameOptions = field(default_factory=GameOptions)

    def get_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

@dataclass(frozen=True)
class GameResult:
    player_id: str
    player_name: str
    position: int
    title: Optional[str] = None
