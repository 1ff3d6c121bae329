from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class FormatConfigError(ValueError):
    """A format was configured in a way it cannot be evaluated."""


class FormatType(str, Enum):
    STROKE_PLAY = "stroke_play"
    MATCH_PLAY = "match_play"
    NASSAU = "nassau"
    SKINS = "skins"
    WOLF = "wolf"
    POINTS_HILO = "points_hilo"
    STABLEFORD = "stableford"
    SCRAMBLE = "scramble"


class HandicapMode(str, Enum):
    FULL = "full"
    OFF_LOW = "off_low"
    GIVE_BACK = "give_back"


class JunkType(str, Enum):
    GREENIE = "greenie"
    SANDY = "sandy"
    BARKIE = "barkie"
    POLIE = "polie"
    SNAKE = "snake"
    BIRDIE = "birdie"
    EAGLE = "eagle"


# ---------------------------------------------------------------------------
# Round records
# ---------------------------------------------------------------------------


class Hole(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1, le=18)
    par: int
    stroke_index: int = Field(ge=1, le=18)
    yardage: Optional[int] = None

    @field_validator("par")
    @classmethod
    def _par_in_range(cls, value: int) -> int:
        if value not in (3, 4, 5):
            raise ValueError(f"par must be 3, 4 or 5, got {value}")
        return value


class Player(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    handicap_index: Optional[float] = None
    playing_handicap: int = 0


class Team(BaseModel):
    label: str
    player_ids: List[str] = Field(min_length=1)

    @field_validator("player_ids")
    @classmethod
    def _no_duplicates(cls, value: List[str]) -> List[str]:
        if len(set(value)) != len(value):
            raise ValueError("a player can appear only once on a team")
        return value


class RoundSnapshot(BaseModel):
    round_id: str
    name: Optional[str] = None
    holes: List[Hole] = Field(min_length=1)
    players: List[Player] = Field(min_length=1)
    # player id -> hole number -> gross strokes; absent means not yet played
    scores: Dict[str, Dict[int, int]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_references(self) -> "RoundSnapshot":
        numbers = [hole.number for hole in self.holes]
        if len(set(numbers)) != len(numbers):
            raise ValueError("hole numbers must be unique")
        indexes = [hole.stroke_index for hole in self.holes]
        if len(set(indexes)) != len(indexes):
            raise ValueError("stroke indexes must be unique")
        ids = [player.id for player in self.players]
        if len(set(ids)) != len(ids):
            raise ValueError("player ids must be unique")
        known_holes = set(numbers)
        known_players = set(ids)
        for player_id, by_hole in self.scores.items():
            if player_id not in known_players:
                raise ValueError(f"scores reference unknown player {player_id}")
            for hole_number, gross in by_hole.items():
                if hole_number not in known_holes:
                    raise ValueError(f"scores reference unknown hole {hole_number}")
                if gross < 1:
                    raise ValueError(f"gross score must be positive, got {gross} on hole {hole_number}")
        return self

    def sorted_holes(self) -> List[Hole]:
        return sorted(self.holes, key=lambda hole: hole.number)

    def player_ids(self) -> List[str]:
        return [player.id for player in self.players]

    def gross(self, player_id: str, hole_number: int) -> Optional[int]:
        return self.scores.get(player_id, {}).get(hole_number)


# ---------------------------------------------------------------------------
# Format configuration (closed tagged union over FormatType)
# ---------------------------------------------------------------------------


class PressRequest(BaseModel):
    starting_hole: int = Field(ge=1, le=18)
    stake: Optional[float] = None


class WolfDecision(BaseModel):
    hole_number: int = Field(ge=1, le=18)
    partner_id: Optional[str] = None
    lone_wolf: bool = False

    @model_validator(mode="after")
    def _partner_or_lone(self) -> "WolfDecision":
        if self.lone_wolf and self.partner_id is not None:
            raise ValueError("a lone wolf cannot also pick a partner")
        if not self.lone_wolf and self.partner_id is None:
            raise ValueError("a wolf decision needs a partner or lone_wolf")
        return self


class _GameConfig(BaseModel):
    label: Optional[str] = None
    handicap_mode: HandicapMode = HandicapMode.FULL
    use_net: bool = True


class StrokePlayConfig(_GameConfig):
    format: Literal["stroke_play"] = "stroke_play"
    player_ids: Optional[List[str]] = None
    stake: float = Field(default=0.0, ge=0)


class MatchPlayConfig(_GameConfig):
    format: Literal["match_play"] = "match_play"
    team_a: Team
    team_b: Team
    stake_per_hole: float = Field(default=1.0, ge=0)
    start_hole: int = Field(default=1, ge=1, le=18)
    end_hole: int = Field(default=18, ge=1, le=18)
    presses: List[PressRequest] = Field(default_factory=list)
    high_ball_tiebreak: bool = False


class NassauConfig(_GameConfig):
    format: Literal["nassau"] = "nassau"
    team_a: Team
    team_b: Team
    stake_per_man: float = Field(default=1.0, ge=0)
    auto_press: bool = False
    auto_press_threshold: int = Field(default=2, ge=1)
    high_ball_tiebreak: bool = False


class SkinsConfig(_GameConfig):
    format: Literal["skins"] = "skins"
    player_ids: Optional[List[str]] = None
    skin_value: float = Field(default=1.0, ge=0)
    carryover: bool = True


class WolfConfig(_GameConfig):
    format: Literal["wolf"] = "wolf"
    tee_order: List[str]
    stake_per_hole: float = Field(default=1.0, ge=0)
    lone_wolf_multiplier: float = Field(default=2.0, ge=1)
    decisions: List[WolfDecision] = Field(default_factory=list)
    # hole number -> explicit tee order for that hole
    tee_order_overrides: Dict[int, List[str]] = Field(default_factory=dict)


class PointsHiLoConfig(_GameConfig):
    format: Literal["points_hilo"] = "points_hilo"
    team_a: Team
    team_b: Team
    stake_per_point: float = Field(default=0.0, ge=0)


class StablefordConfig(_GameConfig):
    format: Literal["stableford"] = "stableford"
    team_a: Team
    team_b: Team
    stake_per_point: float = Field(default=0.0, ge=0)


class ScrambleConfig(_GameConfig):
    format: Literal["scramble"] = "scramble"
    team_a: Team
    team_b: Team
    stake_per_man: float = Field(default=0.0, ge=0)


FormatConfig = Annotated[
    Union[
        StrokePlayConfig,
        MatchPlayConfig,
        NassauConfig,
        SkinsConfig,
        WolfConfig,
        PointsHiLoConfig,
        StablefordConfig,
        ScrambleConfig,
    ],
    Field(discriminator="format"),
]


class JunkBetConfig(BaseModel):
    type: JunkType
    enabled: bool = True
    value: float = Field(default=5.0, ge=0)


def _default_junk_bets() -> List[JunkBetConfig]:
    return [
        JunkBetConfig(type=JunkType.GREENIE, value=5),
        JunkBetConfig(type=JunkType.SANDY, value=5),
        JunkBetConfig(type=JunkType.BARKIE, value=5),
        JunkBetConfig(type=JunkType.POLIE, value=5),
        JunkBetConfig(type=JunkType.SNAKE, value=5),
        JunkBetConfig(type=JunkType.BIRDIE, value=5),
        JunkBetConfig(type=JunkType.EAGLE, value=10),
    ]


class JunkConfig(BaseModel):
    enabled: bool = True
    bets: List[JunkBetConfig] = Field(default_factory=_default_junk_bets)
    auto_detect: bool = False
    player_ids: Optional[List[str]] = None

    def value_for(self, junk_type: JunkType) -> Optional[float]:
        if not self.enabled:
            return None
        for bet in self.bets:
            if bet.type == junk_type and bet.enabled:
                return bet.value
        return None


class JunkClaim(BaseModel):
    player_id: str
    hole_number: int = Field(ge=1, le=18)
    type: JunkType
    count: int = Field(default=1, ge=1)


# ---------------------------------------------------------------------------
# Engine output
# ---------------------------------------------------------------------------


class HoleResult(BaseModel):
    hole_number: int
    side_a_net: Optional[int] = None
    side_b_net: Optional[int] = None
    winner: Optional[Literal["A", "B", "halved"]] = None
    lead: int = 0
    complete: bool = False


class MatchState(BaseModel):
    label: str
    start_hole: int
    end_hole: int
    stake: float
    lead: int = 0
    holes_played: int = 0
    holes_remaining: int = 0
    closed: bool = False
    halved: bool = False
    dormie: bool = False
    finished: bool = False
    winner: Optional[Literal["A", "B", "halved"]] = None
    status: str = "AS"
    result: Optional[str] = None
    description: Optional[str] = None
    closed_on_hole: Optional[int] = None
    press_number: Optional[int] = None
    parent: Optional[str] = None
    hole_results: List[HoleResult] = Field(default_factory=list)


class MatchPlayState(BaseModel):
    team_a: Team
    team_b: Team
    main: MatchState
    presses: List[MatchState] = Field(default_factory=list)


class HoleStake(BaseModel):
    hole_number: int
    total: float
    main: float
    presses: Dict[int, float] = Field(default_factory=dict)


class Exposure(BaseModel):
    total: float
    main: float
    presses: Dict[int, float] = Field(default_factory=dict)
    position: float


class NassauState(BaseModel):
    team_a: Team
    team_b: Team
    stake_per_man: float
    front: MatchState
    back: MatchState
    overall: MatchState
    presses: List[MatchState] = Field(default_factory=list)
    current_hole: int
    holes_played: int


class SkinsHoleResult(BaseModel):
    hole_number: int
    scores: Dict[str, Optional[int]] = Field(default_factory=dict)
    winner_id: Optional[str] = None
    carried: bool = False
    skins_in_pot: int = 1
    pot_value: float = 0.0
    complete: bool = False


class SkinsState(BaseModel):
    player_ids: List[str]
    skin_value: float
    carryover: bool
    hole_results: List[SkinsHoleResult] = Field(default_factory=list)
    carry_count: int = 0
    carry_value: float = 0.0
    skin_counts: Dict[str, int] = Field(default_factory=dict)
    skin_values: Dict[str, float] = Field(default_factory=dict)
    total_skins_awarded: int = 0
    current_hole: int = 1
    holes_played: int = 0


class WolfHoleResult(BaseModel):
    hole_number: int
    tee_order: List[str]
    wolf_id: str
    partner_id: Optional[str] = None
    lone_wolf: bool = False
    decided: bool = False
    complete: bool = False
    wolf_side_net: Optional[int] = None
    field_net: Optional[int] = None
    winner: Optional[Literal["wolf", "field", "halved"]] = None
    amounts: Dict[str, float] = Field(default_factory=dict)


class WolfState(BaseModel):
    tee_order: List[str]
    stake_per_hole: float
    lone_wolf_multiplier: float
    hole_results: List[WolfHoleResult] = Field(default_factory=list)
    player_points: Dict[str, float] = Field(default_factory=dict)
    player_totals: Dict[str, float] = Field(default_factory=dict)
    current_hole: int = 1
    current_wolf_id: Optional[str] = None
    holes_played: int = 0


class SnakeTransfer(BaseModel):
    player_id: str
    hole_number: int


class SnakeState(BaseModel):
    holder_id: Optional[str] = None
    transfers: List[SnakeTransfer] = Field(default_factory=list)
    value_per_player: float = 0.0


class PlayerJunkSummary(BaseModel):
    player_id: str
    claim_counts: Dict[str, int] = Field(default_factory=dict)
    claims_value: float = 0.0
    claims_net: float = 0.0
    snake_net: float = 0.0
    net: float = 0.0


class JunkState(BaseModel):
    player_ids: List[str]
    summaries: List[PlayerJunkSummary] = Field(default_factory=list)
    snake: Optional[SnakeState] = None
    total_claimed: float = 0.0
    ignored_claims: int = 0


class StrokePlayEntry(BaseModel):
    player_id: str
    holes_played: int = 0
    gross_total: int = 0
    net_total: int = 0
    to_par: int = 0
    position: int = 1


class StrokePlayState(BaseModel):
    use_net: bool
    entries: List[StrokePlayEntry] = Field(default_factory=list)
    complete: bool = False
    winner_ids: List[str] = Field(default_factory=list)


class PointsHoleResult(BaseModel):
    hole_number: int
    team_a_points: float = 0.0
    team_b_points: float = 0.0
    complete: bool = False


class PointsState(BaseModel):
    format: Literal["points_hilo", "stableford"]
    team_a: Team
    team_b: Team
    hole_results: List[PointsHoleResult] = Field(default_factory=list)
    team_a_total: float = 0.0
    team_b_total: float = 0.0
    holes_played: int = 0
    current_hole: int = 1


class ScrambleState(BaseModel):
    team_a: Team
    team_b: Team
    team_a_total: int = 0
    team_b_total: int = 0
    holes_completed: int = 0
    complete: bool = False
    winner: Optional[Literal["A", "B", "halved"]] = None
    margin: int = 0


class NarrativeEvent(BaseModel):
    hole: int
    text: str
    type: Literal["momentum_shift", "press", "dramatic_hole", "match_close", "status_update"]
    intensity: Literal["low", "medium", "high"]


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------


class SettlementLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    format: str
    game: str
    bet: str
    amount: float


class RoundSettlement(BaseModel):
    round_id: str
    lines: List[SettlementLine] = Field(default_factory=list)
    totals: Dict[str, float] = Field(default_factory=dict)
    states: Dict[str, Any] = Field(default_factory=dict)
    setup_incomplete: Dict[str, str] = Field(default_factory=dict)


class Payment(BaseModel):
    from_id: str
    to_id: str
    amount: float


class TripSettlement(BaseModel):
    totals: Dict[str, float] = Field(default_factory=dict)
    by_round: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    payments: List[Payment] = Field(default_factory=list)
