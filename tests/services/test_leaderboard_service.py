from types import SimpleNamespace

import pytest

from arena.core.exceptions import ConcurrentModification, InvalidAmount, MissingReason, NotFound
from arena.models.enums import NotificationType
from arena.schemas import leaderboard_schemas, tournament_schemas
from arena.services import leaderboard_service, notification_service, tournament_service


def ranks_by_user(entries):
    return {entry.user_id: entry.rank_position for entry in entries}


class TestRankingPrimitives:

    @pytest.mark.parametrize("kills, deaths, expected", [
        (10, 0, 10.0),
        (0, 0, 0.0),
        (10, 4, 2.5),
        (1, 3, 1 / 3),
    ])
    def test_kd_ratio(self, kills, deaths, expected):
        assert leaderboard_service.kd_ratio(kills, deaths) == expected

    def test_compute_ranks_orders_by_score_then_kills(self):
        entries = [
            SimpleNamespace(name="a", score=100, kills=5),
            SimpleNamespace(name="b", score=100, kills=8),
            SimpleNamespace(name="c", score=80, kills=10),
        ]
        ranked = leaderboard_service.compute_ranks(entries)
        assert [(entry.name, rank) for entry, rank in ranked] == [("b", 1), ("a", 2), ("c", 3)]

    def test_full_tie_keeps_input_order(self):
        entries = [SimpleNamespace(name=name, score=50, kills=3) for name in ("x", "y", "z")]
        ranked = leaderboard_service.compute_ranks(entries)
        assert [(entry.name, rank) for entry, rank in ranked] == [("x", 1), ("y", 2), ("z", 3)]

    def test_compute_ranks_empty(self):
        assert leaderboard_service.compute_ranks([]) == []

    @pytest.mark.parametrize("raw", [-50, "-1", "abc", "", None, True, float("nan"), float("inf"), [10]])
    def test_invalid_prize_amounts(self, raw):
        with pytest.raises(InvalidAmount):
            leaderboard_service.parse_prize_amount(raw)

    @pytest.mark.parametrize("raw, expected", [(0, 0.0), (500, 500.0), ("250.5", 250.5), (" 75 ", 75.0)])
    def test_valid_prize_amounts(self, raw, expected):
        assert leaderboard_service.parse_prize_amount(raw) == expected


class TestRecalculateRanks:

    def test_scenario_score_then_kills(self, db, make_tournament, make_entry):
        tournament = make_tournament()
        make_entry(tournament, "player_a", score=100, kills=5)
        make_entry(tournament, "player_b", score=100, kills=8)
        make_entry(tournament, "player_c", score=80, kills=10)

        ranked = leaderboard_service.recalculate_ranks(db, tournament.id)

        assert [entry.user_id for entry in ranked] == ["player_b", "player_a", "player_c"]
        assert ranks_by_user(ranked) == {"player_b": 1, "player_a": 2, "player_c": 3}

    def test_recalculate_is_idempotent(self, db, make_tournament, make_entry):
        tournament = make_tournament()
        for index, (score, kills) in enumerate([(30, 1), (90, 4), (90, 4), (10, 9), (90, 7)]):
            make_entry(tournament, f"player_{index}", score=score, kills=kills)

        first = ranks_by_user(leaderboard_service.recalculate_ranks(db, tournament.id))
        second = ranks_by_user(leaderboard_service.recalculate_ranks(db, tournament.id))

        assert first == second
        assert sorted(first.values()) == [1, 2, 3, 4, 5]

    def test_ranks_not_updated_until_recalculated(self, db, make_tournament, make_entry):
        tournament = make_tournament()
        entry = make_entry(tournament, "player_a", score=10)
        assert entry.rank_position is None

        leaderboard_service.recalculate_ranks(db, tournament.id)
        updated = leaderboard_service.update_entry(db, entry.id, leaderboard_schemas.LeaderboardEntryUpdate(score=999))
        assert updated.rank_position == 1

    def test_list_leaderboard_orders_by_rank(self, db, make_tournament, make_entry):
        tournament = make_tournament()
        make_entry(tournament, "player_a", score=10)
        make_entry(tournament, "player_b", score=20)
        leaderboard_service.recalculate_ranks(db, tournament.id)

        listed = leaderboard_service.list_leaderboard(db, tournament.id)
        assert [entry.user_id for entry in listed] == ["player_b", "player_a"]

    def test_other_tournaments_untouched(self, db, make_tournament, make_entry):
        first, second = make_tournament(), make_tournament()
        make_entry(first, "player_a", score=10)
        other = make_entry(second, "player_b", score=50)

        leaderboard_service.recalculate_ranks(db, first.id)
        db.refresh(other)
        assert other.rank_position is None


class TestEntryStats:

    def test_kd_ratio_computed_on_create_and_update(self, db, make_tournament, make_entry):
        entry = make_entry(make_tournament(), "player_a", kills=12, deaths=0)
        assert entry.kd_ratio == 12.0

        updated = leaderboard_service.update_entry(db, entry.id, leaderboard_schemas.LeaderboardEntryUpdate(deaths=4))
        assert updated.kd_ratio == 3.0
        assert updated.kills == 12

    def test_explicit_null_leaves_stat_unchanged(self, db, make_tournament, make_entry):
        entry = make_entry(make_tournament(), "player_a", score=40)
        updated = leaderboard_service.update_entry(
            db, entry.id, leaderboard_schemas.LeaderboardEntryUpdate(score=None, admin_notes="checked")
        )
        assert updated.score == 40
        assert updated.admin_notes == "checked"


class TestDisqualification:

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_disqualify_requires_reason(self, db, make_tournament, make_entry, reason):
        entry = make_entry(make_tournament(), "player_a")
        with pytest.raises(MissingReason):
            leaderboard_service.set_disqualification(db, entry.id, True, reason)
        db.refresh(entry)
        assert entry.is_disqualified is False
        assert entry.disqualification_reason is None

    def test_disqualify_and_reinstate(self, db, make_tournament, make_entry):
        entry = make_entry(make_tournament(), "player_a")

        disqualified = leaderboard_service.set_disqualification(db, entry.id, True, "  Emulator detected ")
        assert disqualified.is_disqualified is True
        assert disqualified.disqualification_reason == "Emulator detected"

        reinstated = leaderboard_service.set_disqualification(db, entry.id, False)
        assert reinstated.is_disqualified is False
        assert reinstated.disqualification_reason is None

    def test_disqualified_entry_keeps_raw_rank(self, db, make_tournament, make_entry):
        tournament = make_tournament()
        top = make_entry(tournament, "player_a", score=100)
        make_entry(tournament, "player_b", score=90)
        make_entry(tournament, "player_c", score=80)
        leaderboard_service.set_disqualification(db, top.id, True, "Teaming")

        ranked = leaderboard_service.recalculate_ranks(db, tournament.id)
        assert ranks_by_user(ranked) == {"player_a": 1, "player_b": 2, "player_c": 3}

        qualified = leaderboard_service.get_qualified_ranking(db, tournament.id)
        assert [(q.user_id, q.raw_rank, q.qualified_rank) for q in qualified] == [
            ("player_b", 2, 1),
            ("player_c", 3, 2),
        ]

    def test_stale_disqualification_is_rejected(self, file_sessions):
        setup, first_admin, second_admin = file_sessions(), file_sessions(), file_sessions()
        tournament = tournament_service.create_tournament(
            setup,
            tournament_schemas.TournamentCreate(title="Race Cup", game_name="BGMI", max_participants=5),
            creator_id="admin_1",
        )
        entry = leaderboard_service.create_entry(
            setup, leaderboard_schemas.LeaderboardEntryCreate(tournament_id=tournament.id, user_id="player_a")
        )

        held_by_second = leaderboard_service.get_entry(second_admin, entry.id)
        leaderboard_service.set_disqualification(first_admin, entry.id, True, "Teaming")

        assert held_by_second.is_disqualified is False
        with pytest.raises(ConcurrentModification):
            leaderboard_service.set_disqualification(second_admin, entry.id, True, "Emulator detected")

        setup.expire_all()
        stored = leaderboard_service.get_entry(setup, entry.id)
        assert stored.is_disqualified is True
        assert stored.disqualification_reason == "Teaming"


class TestLeaderboardStats:

    def test_counts_and_prize_total(self, db, make_tournament, make_entry):
        tournament = make_tournament()
        winner = make_entry(tournament, "player_a", score=100)
        cheater = make_entry(tournament, "player_b", score=90)
        make_entry(tournament, "player_c", score=80)
        make_entry(make_tournament(), "player_d")
        leaderboard_service.set_disqualification(db, cheater.id, True, "Teaming")
        leaderboard_service.distribute_prize(db, winner.id, 500)

        stats = leaderboard_service.get_leaderboard_stats(db, tournament.id)

        assert stats.total == 3
        assert stats.disqualified == 1
        assert stats.prize_distributed == 1
        assert stats.total_prize == 500

    def test_empty_tournament(self, db, make_tournament):
        stats = leaderboard_service.get_leaderboard_stats(db, make_tournament().id)
        assert (stats.total, stats.disqualified, stats.prize_distributed, stats.total_prize) == (0, 0, 0, 0)

    def test_missing_tournament(self, db):
        with pytest.raises(NotFound):
            leaderboard_service.get_leaderboard_stats(db, 999)


class TestPrizeDistribution:

    def test_negative_prize_rejected(self, db, make_tournament, make_entry):
        entry = make_entry(make_tournament(), "player_a")
        with pytest.raises(InvalidAmount):
            leaderboard_service.distribute_prize(db, entry.id, -50)
        db.refresh(entry)
        assert entry.prize_distributed is False
        assert entry.prize_won == 0

    def test_positive_prize_notifies_winner(self, db, make_tournament, make_entry):
        tournament = make_tournament()
        entry = make_entry(tournament, "player_a")

        paid = leaderboard_service.distribute_prize(db, entry.id, 500)

        assert paid.prize_won == 500
        assert paid.prize_distributed is True
        latest = notification_service.get_user_notifications(db, "player_a")[0]
        assert latest.type == NotificationType.SUCCESS
        assert "₹500" in latest.message
        assert tournament.title in latest.message

    def test_zero_prize_is_not_distributed(self, db, make_tournament, make_entry):
        entry = make_entry(make_tournament(), "player_a")
        leaderboard_service.distribute_prize(db, entry.id, 200)

        withdrawn = leaderboard_service.distribute_prize(db, entry.id, "0")

        assert withdrawn.prize_won == 0
        assert withdrawn.prize_distributed is False
        assert len(notification_service.get_user_notifications(db, "player_a")) == 1

    def test_repeat_distribution_overwrites(self, db, make_tournament, make_entry):
        entry = make_entry(make_tournament(), "player_a")
        leaderboard_service.distribute_prize(db, entry.id, 100)
        repaid = leaderboard_service.distribute_prize(db, entry.id, 150)

        assert repaid.prize_won == 150
        assert len(notification_service.get_user_notifications(db, "player_a")) == 2
