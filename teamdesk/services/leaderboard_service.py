"""Rankings derived from the quality scores recorded on task submissions.

Members are ranked by the average score of their rated submissions. Leads are
ranked by the average score of the tasks routed to them, where a task scores
the mean over all of its submissions with unrated work counting as zero.
"""

from collections import defaultdict
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamdesk.db.models import Task, User
from teamdesk.security import DOMAIN_LEAD, MEMBER, Principal

MEMBERS_BOARD = "members"
LEADS_BOARD = "leads"


@dataclass(slots=True)
class Standing:
    principal: Principal
    average_score: float
    rated_count: int


def _score(submission) -> float:
    value = submission.get("quality_score") if isinstance(submission, dict) else None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _author_id(submission) -> str | None:
    author = submission.get("author") if isinstance(submission, dict) else None
    return author.get("id") if isinstance(author, dict) else None


def member_scores(tasks) -> dict[str, list[float]]:
    scores: dict[str, list[float]] = defaultdict(list)
    for task in tasks:
        for submission in task.submissions or []:
            score = _score(submission)
            author_id = _author_id(submission)
            if author_id and score > 0:
                scores[author_id].append(score)
    return scores


def lead_scores(tasks) -> dict[str, list[float]]:
    scores: dict[str, list[float]] = defaultdict(list)
    for task in tasks:
        lead = task.assigned_to_lead if isinstance(task.assigned_to_lead, dict) else None
        submissions = task.submissions or []
        if not lead or not lead.get("id") or not submissions:
            continue
        average = sum(_score(s) for s in submissions) / len(submissions)
        if average > 0:
            scores[lead["id"]].append(average)
    return scores


def rank(scores: dict[str, list[float]], users, role: str, domain: str | None = None) -> list[Standing]:
    standings = []
    for user in users:
        principal = Principal.from_user(user)
        if principal.effective_role != role or principal.id not in scores:
            continue
        if domain and domain not in principal.domains:
            continue
        values = scores[principal.id]
        standings.append(Standing(principal, round(sum(values) / len(values), 2), len(values)))
    standings.sort(key=lambda s: (-s.average_score, (s.principal.email or "").lower()))
    return standings


class LeaderboardService:
    def standings(self, db: Session, board: str, domain: str | None = None) -> list[Standing]:
        tasks = db.execute(select(Task)).scalars().all()
        users = db.execute(select(User)).scalars().all()
        if board == LEADS_BOARD:
            return rank(lead_scores(tasks), users, DOMAIN_LEAD, domain)
        if board == MEMBERS_BOARD:
            return rank(member_scores(tasks), users, MEMBER, domain)
        raise ValueError(f"Unknown leaderboard: {board}")
