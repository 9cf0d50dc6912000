from pydantic import BaseModel, Field

LEADERBOARD_PATTERN = r"^(members|leads)$"


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    email: str | None = None
    name: str | None = None
    domains: list[str] = Field(default_factory=list)
    average_score: float
    rated_count: int


class LeaderboardResponse(BaseModel):
    board: str
    domain: str | None = None
    items: list[LeaderboardEntry] = Field(default_factory=list)
    count: int
