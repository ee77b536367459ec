"""Leaderboard ranking engine.

Ranks are a pure function of the entry set for one tournament: entries are
ordered by score, then kills, both descending, and numbered from 1 with no
gaps. Equal score and equal kills keep their input order (ascending entry
id when read from the database), since no further tie-break is defined.

Disqualified entries keep their raw rank. ``qualified_ranks`` offers a
second numbering that skips them, for prize decisions; it is computed on
read and never stored.

Nothing here recomputes ranks implicitly. Score edits, disqualification and
prize changes leave ``rank_position`` alone until ``recalculate_ranks`` runs.
"""

import math
from numbers import Number
from typing import Any, Iterable, List, Optional, Tuple, TypeVar

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from arena.core.database import commit_or_raise
from arena.core.exceptions import ConcurrentModification, InvalidAmount, MissingReason, NotFound
from arena.core.logging_config import get_logger
from arena.models import leaderboard as leaderboard_model
from arena.models.enums import NotificationType
from arena.schemas import leaderboard_schemas
from arena.services import notification_service
from arena.services.tournament_service import get_tournament

logger = get_logger(__name__)

LeaderboardEntry = leaderboard_model.LeaderboardEntry

E = TypeVar("E")


def kd_ratio(kills: int, deaths: int) -> float:
    """Kills per death; with no deaths the ratio is the kill count itself."""
    if deaths > 0:
        return kills / deaths
    return float(kills)


def rank_sort_key(entry) -> Tuple[int, int]:
    return (-entry.score, -entry.kills)


def compute_ranks(entries: Iterable[E]) -> List[Tuple[E, int]]:
    ordered = sorted(entries, key=rank_sort_key)
    return [(entry, index + 1) for index, entry in enumerate(ordered)]


def qualified_ranks(entries: Iterable[E]) -> List[Tuple[E, int, int]]:
    """(entry, raw_rank, qualified_rank) for every entry not disqualified."""
    result = []
    qualified = 0
    for entry, raw_rank in compute_ranks(entries):
        if entry.is_disqualified:
            continue
        qualified += 1
        result.append((entry, raw_rank, qualified))
    return result


def parse_prize_amount(raw: Any) -> float:
    if isinstance(raw, bool):
        raise InvalidAmount("Prize amount must be a number", {"amount": raw})
    if isinstance(raw, Number):
        amount = float(raw)
    elif isinstance(raw, str):
        try:
            amount = float(raw.strip())
        except ValueError:
            raise InvalidAmount(f"Prize amount is not numeric: {raw!r}", {"amount": raw})
    else:
        raise InvalidAmount("Prize amount must be a number", {"amount": repr(raw)})

    if not math.isfinite(amount):
        raise InvalidAmount("Prize amount must be finite", {"amount": str(raw)})
    if amount < 0:
        raise InvalidAmount(f"Prize amount cannot be negative: {amount}", {"amount": amount})
    return amount


def get_entry(db: Session, entry_id: int) -> leaderboard_model.LeaderboardEntry:
    entry = db.get(LeaderboardEntry, entry_id)
    if not entry:
        raise NotFound("Leaderboard entry", entry_id)
    return entry


def list_leaderboard(db: Session, tournament_id: int) -> List[leaderboard_model.LeaderboardEntry]:
    get_tournament(db, tournament_id)
    return db.query(LeaderboardEntry)\
        .filter(LeaderboardEntry.tournament_id == tournament_id)\
        .order_by(
            LeaderboardEntry.rank_position.is_(None),
            LeaderboardEntry.rank_position,
            LeaderboardEntry.score.desc(),
            LeaderboardEntry.kills.desc(),
            LeaderboardEntry.id,
        ).all()


def _entries_for_ranking(db: Session, tournament_id: int) -> List[leaderboard_model.LeaderboardEntry]:
    return db.query(LeaderboardEntry)\
        .filter(LeaderboardEntry.tournament_id == tournament_id)\
        .order_by(LeaderboardEntry.id)\
        .all()


def get_qualified_ranking(db: Session, tournament_id: int) -> List[leaderboard_schemas.QualifiedRank]:
    get_tournament(db, tournament_id)
    return [
        leaderboard_schemas.QualifiedRank(
            entry_id=entry.id,
            user_id=entry.user_id,
            raw_rank=raw_rank,
            qualified_rank=qualified_rank,
        )
        for entry, raw_rank, qualified_rank in qualified_ranks(_entries_for_ranking(db, tournament_id))
    ]


def get_leaderboard_stats(db: Session, tournament_id: int) -> leaderboard_schemas.LeaderboardSummary:
    get_tournament(db, tournament_id)
    total, disqualified, distributed, total_prize = db.query(
        func.count(LeaderboardEntry.id),
        func.coalesce(func.sum(case((LeaderboardEntry.is_disqualified.is_(True), 1), else_=0)), 0),
        func.coalesce(func.sum(case((LeaderboardEntry.prize_distributed.is_(True), 1), else_=0)), 0),
        func.coalesce(func.sum(LeaderboardEntry.prize_won), 0),
    ).filter(LeaderboardEntry.tournament_id == tournament_id).one()
    return leaderboard_schemas.LeaderboardSummary(
        total=total,
        disqualified=disqualified,
        prize_distributed=distributed,
        total_prize=total_prize,
    )


def recalculate_ranks(db: Session, tournament_id: int) -> List[leaderboard_model.LeaderboardEntry]:
    """Re-sort every entry of the tournament and rewrite all rank positions.

    One read, an in-memory sort, and a single commit for all the writes.
    """
    get_tournament(db, tournament_id)
    ranked = compute_ranks(_entries_for_ranking(db, tournament_id))

    changed = 0
    for entry, rank in ranked:
        if entry.rank_position != rank:
            entry.rank_position = rank
            changed += 1

    commit_or_raise(db, "recalculate_ranks")
    logger.info("ranks_recalculated", tournament_id=tournament_id, entries=len(ranked), changed=changed)
    return [entry for entry, _ in ranked]


def create_entry(db: Session, entry_in: leaderboard_schemas.LeaderboardEntryCreate) -> leaderboard_model.LeaderboardEntry:
    get_tournament(db, entry_in.tournament_id)
    entry = LeaderboardEntry(
        **entry_in.model_dump(),
        kd_ratio=kd_ratio(entry_in.kills, entry_in.deaths),
        is_disqualified=False,
        prize_won=0,
        prize_distributed=False,
    )
    db.add(entry)
    commit_or_raise(db, "create_leaderboard_entry")
    db.refresh(entry)
    logger.info("leaderboard_entry_created", entry_id=entry.id, tournament_id=entry.tournament_id, user_id=entry.user_id)
    return entry


def update_entry(db: Session, entry_id: int, entry_update: leaderboard_schemas.LeaderboardEntryUpdate) -> leaderboard_model.LeaderboardEntry:
    entry = get_entry(db, entry_id)
    update_data = entry_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        # Stat columns are non-nullable; an explicit null leaves them unchanged
        if value is None and key not in ("team_id", "admin_notes"):
            continue
        setattr(entry, key, value)
    entry.kd_ratio = kd_ratio(entry.kills, entry.deaths)

    commit_or_raise(db, "update_leaderboard_entry")
    db.refresh(entry)
    logger.info("leaderboard_entry_updated", entry_id=entry_id, fields=sorted(update_data))
    return entry


def set_disqualification(db: Session, entry_id: int, disqualified: bool, reason: Optional[str] = None) -> leaderboard_model.LeaderboardEntry:
    entry = get_entry(db, entry_id)

    if disqualified:
        reason = (reason or "").strip()
        if not reason:
            raise MissingReason()
    else:
        reason = None

    observed = entry.is_disqualified
    updated = db.query(LeaderboardEntry).filter(
        LeaderboardEntry.id == entry_id,
        LeaderboardEntry.is_disqualified == observed,
    ).update({
        LeaderboardEntry.is_disqualified: disqualified,
        LeaderboardEntry.disqualification_reason: reason,
    }, synchronize_session=False)
    if updated != 1:
        db.rollback()
        raise ConcurrentModification(f"Leaderboard entry {entry_id} was changed by someone else")

    commit_or_raise(db, "set_disqualification")
    db.refresh(entry)
    logger.info(
        "leaderboard_entry_disqualified" if disqualified else "leaderboard_entry_reinstated",
        entry_id=entry_id,
        tournament_id=entry.tournament_id,
        reason=reason,
    )
    return entry


def distribute_prize(db: Session, entry_id: int, raw_amount: Any) -> leaderboard_model.LeaderboardEntry:
    amount = parse_prize_amount(raw_amount)
    entry = get_entry(db, entry_id)

    previously_distributed = entry.prize_distributed
    entry.prize_won = amount
    # A zero amount withdraws the award; "distributed" always means a positive prize
    entry.prize_distributed = amount > 0

    commit_or_raise(db, "distribute_prize")
    db.refresh(entry)
    logger.info(
        "prize_distributed",
        entry_id=entry_id,
        tournament_id=entry.tournament_id,
        user_id=entry.user_id,
        amount=amount,
        repeat=previously_distributed,
    )

    if entry.prize_distributed:
        tournament_title = entry.tournament.title
        notification_service.emit(
            db,
            user_id=entry.user_id,
            title="Prize Distributed!",
            message=(
                f"Congratulations! You have won ₹{amount:g} in {tournament_title}. "
                "The amount will be transferred within 24-48 hours."
            ),
            type=NotificationType.SUCCESS,
            related_tournament_id=entry.tournament_id,
        )
    return entry


def delete_entry(db: Session, entry_id: int) -> None:
    entry = get_entry(db, entry_id)
    tournament_id = entry.tournament_id
    db.delete(entry)
    commit_or_raise(db, "delete_leaderboard_entry")
    logger.info("leaderboard_entry_deleted", entry_id=entry_id, tournament_id=tournament_id)

