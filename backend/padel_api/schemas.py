from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator

from .time_utils import require_utc

TEAM_SIZE = 2


class StreakHistoryItemOut(BaseModel):
    streak: int
    type: Literal["win", "loss"]
    startMatchId: str
    endMatchId: str
    startDate: datetime
    endDate: datetime


class PlayerStreaksSummaryOut(BaseModel):
    """Signed current streak plus longest runs; no history."""

    currentStreak: int = 0
    streakType: Literal["win", "loss", "none"] = "none"
    longestWinStreak: int = 0
    longestLossStreak: int = 0


class PlayerStreaksOut(PlayerStreaksSummaryOut):
    playerId: str
    streakHistory: List[StreakHistoryItemOut] = Field(default_factory=list)


class GroupStreaksOut(BaseModel):
    groupId: str
    players: Dict[str, PlayerStreaksSummaryOut] = Field(default_factory=dict)


class MatchCreate(BaseModel):
    team1: List[str]
    team2: List[str]
    # Each set is {"team1": games, "team2": games}; checked by validate_set_scores.
    sets: List[Dict[str, Any]]
    playedAt: Optional[datetime] = None

    @field_validator("team1", "team2")
    @classmethod
    def _team_size(cls, value: List[str]) -> List[str]:
        players = [p.strip() for p in value if isinstance(p, str) and p.strip()]
        if len(players) != TEAM_SIZE or len(set(players)) != TEAM_SIZE:
            raise ValueError(f"each team needs {TEAM_SIZE} different players")
        return players

    @field_validator("playedAt")
    @classmethod
    def _played_at_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return require_utc(value, field_name="playedAt")

    @model_validator(mode="after")
    def _teams_disjoint(self) -> "MatchCreate":
        if set(self.team1) & set(self.team2):
            raise ValueError("a player cannot be on both teams")
        return self


class SetScoreOut(BaseModel):
    team1: int
    team2: int


class MatchOut(BaseModel):
    id: str
    groupId: str
    playedAt: datetime
    team1: List[str]
    team2: List[str]
    sets: List[SetScoreOut]
    winner: Optional[Literal[1, 2]] = None


class PartnershipOut(BaseModel):
    player1Id: str
    player2Id: str
    player1Name: str = "Unknown"
    player2Name: str = "Unknown"
    matchesPlayed: int
    wins: int
    losses: int
    winRate: float
    avgEloChangeWhenPaired: float
    avgIndividualEloChange: float
    eloChangeDelta: float
    commonOpponentsBeaten: int
    firstPlayedTogether: Optional[datetime] = None
    lastPlayedTogether: Optional[datetime] = None
    synergyScore: float
    tier: Literal["excellent", "good", "fair", "poor"]
    matchesBadge: str
    eloDeltaIndicator: Literal["positive", "negative", "neutral"]


class PartnershipListOut(BaseModel):
    partnerships: List[PartnershipOut] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    perPage: int


class RankedPartnerOut(PartnershipOut):
    partnerId: str


class PlayerPartnershipsOut(BaseModel):
    playerId: str
    playerName: str
    bestPartners: List[RankedPartnerOut] = Field(default_factory=list)
    worstPartners: List[RankedPartnerOut] = Field(default_factory=list)
    totalPartnerships: int = 0


class PartnershipMatchOut(BaseModel):
    matchId: str
    playedAt: datetime
    result: Literal["win", "loss"]
    score: str
    opponents: List[str]


class PartnershipDetailOut(BaseModel):
    partnership: PartnershipOut
    matchHistory: List[PartnershipMatchOut] = Field(default_factory=list)


class HeadToHeadRecordOut(BaseModel):
    playerId: str
    playerName: str
    wins: int = 0
    losses: int = 0
    setsWon: int = 0
    setsLost: int = 0


class HeadToHeadMatchOut(BaseModel):
    id: str
    playedAt: datetime
    winnerId: Optional[str] = None
    playerATeam: List[str]
    playerBTeam: List[str]
    score: str


class HeadToHeadOut(BaseModel):
    playerA: HeadToHeadRecordOut
    playerB: HeadToHeadRecordOut
    totalMatches: int = 0
    matches: List[HeadToHeadMatchOut] = Field(default_factory=list)


class PredictionFactorOut(BaseModel):
    name: str
    value: str
    weight: str
    impact: Literal["team1", "team2", "neutral"]


class TeamPredictionOut(BaseModel):
    playerIds: List[str]
    playerNames: List[str]
    avgElo: int
    winProbability: float


class MatchPredictionOut(BaseModel):
    team1: TeamPredictionOut
    team2: TeamPredictionOut
    predictedWinner: Literal[1, 2]
    confidence: Literal["low", "medium", "high"]
    factors: List[PredictionFactorOut] = Field(default_factory=list)


class RateLimitStatusOut(BaseModel):
    type: str
    limit: int
    remaining: int
    reset: int
