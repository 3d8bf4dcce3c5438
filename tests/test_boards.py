"""
Tests for board purchase admission, renewal into the next round and
board queries.

Run with:
    python -m pytest tests/test_boards.py
"""
from dead_pigeons.errors import (
    BoardNotFound,
    BoardNotOwned,
    InsufficientBalance,
    InvalidNumberSelection,
    InvalidRepeatWeeks,
    PlayerInactive,
    PlayerNotFound,
    RoundNotFound,
    RoundNotOpen,
)
from tests.support import ServiceTestCase


class TestCreateBoard(ServiceTestCase):

    def setUp(self):
        super().setUp()
        self.player = self.make_player()
        self.game = self.bootstrap_round()

    def buy(self, numbers=(1, 2, 3, 4, 5), repeat_weeks=0, player=None, game=None):
        return self.services.boards.create_board(
            self.session,
            (player or self.player).id,
            (game or self.game).id,
            list(numbers),
            repeat_weeks,
        )

    def test_purchase_charges_exact_price(self):
        self.deposit(self.player, 100)
        before = self.balance(self.player)
        board = self.buy([7, 3, 1, 12, 5, 9])
        self.assertEqual(board.numbers, [1, 3, 5, 7, 9, 12])
        self.assertEqual(board.price, 40)
        self.assertIsNone(board.is_winning)
        self.assertEqual(self.balance(self.player), before - 40)

    def test_purchase_with_exactly_enough_balance(self):
        self.deposit(self.player, 20)
        self.buy()
        self.assertEqual(self.balance(self.player), 0)

    def test_insufficient_balance_creates_nothing(self):
        self.deposit(self.player, 10)
        with self.assertRaises(InsufficientBalance) as ctx:
            self.buy()
        self.assertEqual(ctx.exception.kind, "policy_violation")
        self.assertEqual(ctx.exception.details, {"player_id": self.player.id, "balance": 10, "price": 20})
        self.assertEqual(self.services.boards.get_boards_for_player(self.session, self.player.id), [])
        self.assertEqual(self.balance(self.player), 10)

    def test_second_purchase_sees_first(self):
        self.deposit(self.player, 30)
        self.buy()
        with self.assertRaises(InsufficientBalance):
            self.buy([6, 7, 8, 9, 10])
        self.assertEqual(self.balance(self.player), 10)

    def test_pending_deposit_does_not_fund_purchase(self):
        self.deposit(self.player, 100, approve=False)
        with self.assertRaises(InsufficientBalance):
            self.buy()

    def test_inactive_player(self):
        lazy = self.make_player("Lazy Larry", active=False)
        with self.assertRaises(PlayerInactive):
            self.buy(player=lazy)

    def test_deactivated_player(self):
        self.deposit(self.player, 100)
        self.services.players.deactivate_player(self.session, self.player.id)
        with self.assertRaises(PlayerInactive):
            self.buy()

    def test_unknown_player(self):
        with self.assertRaises(PlayerNotFound):
            self.services.boards.create_board(self.session, 999, self.game.id, [1, 2, 3, 4, 5])

    def test_unknown_game(self):
        self.deposit(self.player, 100)
        with self.assertRaises(RoundNotFound):
            self.services.boards.create_board(self.session, self.player.id, 999, [1, 2, 3, 4, 5])

    def test_closed_round_is_not_open(self):
        self.deposit(self.player, 100)
        self.close(self.game)
        with self.assertRaises(RoundNotOpen) as ctx:
            self.buy()
        self.assertEqual(ctx.exception.kind, "state_conflict")

    def test_previous_round_is_not_open(self):
        self.deposit(self.player, 100)
        self.close(self.game)
        self.open_next()
        with self.assertRaises(RoundNotOpen):
            self.buy(game=self.game)

    def test_invalid_selections(self):
        self.deposit(self.player, 1000)
        for numbers in ([1, 2, 3, 4], list(range(1, 10)), [1, 1, 2, 3, 4], [0, 1, 2, 3, 4], [1, 2, 3, 4, 21]):
            with self.subTest(numbers=numbers):
                with self.assertRaises(InvalidNumberSelection):
                    self.buy(numbers)
        self.assertEqual(self.balance(self.player), 1000)

    def test_invalid_repeat_weeks(self):
        self.deposit(self.player, 100)
        with self.assertRaises(InvalidRepeatWeeks):
            self.buy(repeat_weeks=-1)
        with self.assertRaises(InvalidRepeatWeeks):
            self.buy(repeat_weeks=53)

    def test_repeat_flag_follows_repeat_weeks(self):
        self.deposit(self.player, 100)
        once = self.buy(repeat_weeks=0)
        repeating = self.buy(repeat_weeks=3)
        self.assertFalse(once.repeat_active)
        self.assertTrue(repeating.repeat_active)
        self.assertEqual(repeating.repeat_weeks, 3)
        # Only this week is charged; future weeks are charged when they open.
        self.assertEqual(self.balance(self.player), 60)


class TestBoardQueries(ServiceTestCase):

    def test_boards_ordered_by_creation(self):
        a = self.make_player("Ann Able")
        b = self.make_player("Ben Baker")
        self.deposit(a, 100)
        self.deposit(b, 100)
        game = self.bootstrap_round()
        first = self.services.boards.create_board(self.session, b.id, game.id, [1, 2, 3, 4, 5])
        second = self.services.boards.create_board(self.session, a.id, game.id, [2, 3, 4, 5, 6])
        third = self.services.boards.create_board(self.session, b.id, game.id, [3, 4, 5, 6, 7])

        in_game = self.services.boards.get_boards_for_game(self.session, game.id)
        self.assertEqual([x.id for x in in_game], [first.id, second.id, third.id])
        for_b = self.services.boards.get_boards_for_player(self.session, b.id)
        self.assertEqual([x.id for x in for_b], [first.id, third.id])

    def test_unknown_player_boards(self):
        with self.assertRaises(PlayerNotFound):
            self.services.boards.get_boards_for_player(self.session, 42)


class TestStopRepeating(ServiceTestCase):

    def setUp(self):
        super().setUp()
        self.player = self.make_player()
        self.deposit(self.player, 100)
        self.game = self.bootstrap_round()
        self.board = self.services.boards.create_board(
            self.session, self.player.id, self.game.id, [1, 2, 3, 4, 5], 4
        )

    def test_owner_can_stop(self):
        stopped = self.services.boards.stop_repeating(self.session, self.player.id, self.board.id)
        self.assertFalse(stopped.repeat_active)
        self.assertEqual(stopped.repeat_weeks, 0)
        # Nothing is refunded.
        self.assertEqual(self.balance(self.player), 80)

    def test_stopping_twice_is_harmless(self):
        self.services.boards.stop_repeating(self.session, self.player.id, self.board.id)
        again = self.services.boards.stop_repeating(self.session, self.player.id, self.board.id)
        self.assertFalse(again.repeat_active)

    def test_stopped_board_is_not_renewed(self):
        self.services.boards.stop_repeating(self.session, self.player.id, self.board.id)
        self.close(self.game)
        opened = self.open_next()
        self.assertEqual(opened.renewal.renewed, [])
        self.assertEqual(self.services.boards.get_boards_for_game(self.session, opened.game.id), [])

    def test_other_player_cannot_stop(self):
        other = self.make_player("Mallory Mal")
        with self.assertRaises(BoardNotOwned):
            self.services.boards.stop_repeating(self.session, other.id, self.board.id)
        self.assertTrue(self.services.boards.get_board(self.session, self.board.id).repeat_active)

    def test_unknown_board(self):
        with self.assertRaises(BoardNotFound):
            self.services.boards.stop_repeating(self.session, self.player.id, 999)


class TestRenewal(ServiceTestCase):

    def setUp(self):
        super().setUp()
        self.player = self.make_player()
        self.w1 = self.bootstrap_round()

    def buy(self, numbers=(1, 2, 3, 4, 5), repeat_weeks=1, game=None):
        return self.services.boards.create_board(
            self.session, self.player.id, (game or self.w1).id, list(numbers), repeat_weeks
        )

    def test_renewal_copies_numbers_and_charges_again(self):
        self.deposit(self.player, 100)
        source = self.buy([2, 4, 6, 8, 10, 12], repeat_weeks=2)
        self.close(self.w1)
        opened = self.open_next()

        self.assertEqual(len(opened.renewal.renewed), 1)
        renewed = opened.renewal.renewed[0]
        self.assertEqual(renewed.game_id, opened.game.id)
        self.assertEqual(renewed.numbers, [2, 4, 6, 8, 10, 12])
        self.assertEqual(renewed.price, 40)
        self.assertEqual(renewed.repeat_weeks, 1)
        self.assertTrue(renewed.repeat_active)
        self.assertEqual(renewed.renewed_from_id, source.id)
        self.assertIsNone(renewed.is_winning)
        self.assertEqual(self.balance(self.player), 20)

    def test_non_repeating_boards_stay_behind(self):
        self.deposit(self.player, 100)
        self.buy(repeat_weeks=0)
        self.close(self.w1)
        opened = self.open_next()
        self.assertEqual(opened.renewal.renewed, [])

    def test_failed_balance_check_ends_chain(self):
        self.deposit(self.player, 20)
        source = self.buy(repeat_weeks=2)
        self.close(self.w1)
        opened = self.open_next()

        self.assertEqual(opened.renewal.renewed, [])
        self.assertEqual(opened.renewal.stopped_board_ids, [source.id])
        refreshed = self.services.boards.get_board(self.session, source.id)
        self.assertFalse(refreshed.repeat_active)
        self.assertEqual(refreshed.repeat_weeks, 0)
        self.assertEqual(self.balance(self.player), 0)
        # The round still opened.
        self.assertEqual(self.services.games.get_active_game(self.session).id, opened.game.id)

    def test_deactivated_player_chain_ends(self):
        self.deposit(self.player, 100)
        source = self.buy(repeat_weeks=2)
        self.services.players.deactivate_player(self.session, self.player.id)
        self.close(self.w1)
        opened = self.open_next()
        self.assertEqual(opened.renewal.stopped_board_ids, [source.id])
        self.assertEqual(self.balance(self.player), 80)

    def test_failure_for_one_player_does_not_block_others(self):
        poor = self.make_player("Poor Paul")
        self.deposit(poor, 20)
        self.deposit(self.player, 100)
        poor_board = self.services.boards.create_board(self.session, poor.id, self.w1.id, [1, 2, 3, 4, 5], 1)
        rich_board = self.buy(repeat_weeks=1)
        self.close(self.w1)
        opened = self.open_next()
        self.assertEqual([b.renewed_from_id for b in opened.renewal.renewed], [rich_board.id])
        self.assertEqual(opened.renewal.stopped_board_ids, [poor_board.id])

    def test_renewals_in_one_pass_share_the_balance(self):
        self.deposit(self.player, 60)
        first = self.buy([1, 2, 3, 4, 5], repeat_weeks=1)
        second = self.buy([6, 7, 8, 9, 10], repeat_weeks=1)
        self.close(self.w1)
        opened = self.open_next()
        # 60 - 40 spent leaves 20: enough for exactly one renewal.
        self.assertEqual([b.renewed_from_id for b in opened.renewal.renewed], [first.id])
        self.assertEqual(opened.renewal.stopped_board_ids, [second.id])
        self.assertEqual(self.balance(self.player), 0)

    def test_rerunning_renewal_is_idempotent(self):
        self.deposit(self.player, 200)
        source = self.buy(repeat_weeks=3)
        self.close(self.w1)
        opened = self.open_next()
        balance_after_open = self.balance(self.player)

        report = self.services.games.renew_active_round(self.session)
        self.assertEqual(report.renewed, [])
        self.assertEqual(report.already_renewed_board_ids, [source.id])
        self.assertEqual(len(self.services.boards.get_boards_for_game(self.session, opened.game.id)), 1)
        self.assertEqual(self.balance(self.player), balance_after_open)

    def test_chain_runs_out(self):
        self.deposit(self.player, 200)
        self.buy(repeat_weeks=2)
        self.close(self.w1)
        w2 = self.open_next()
        self.assertEqual(w2.renewal.renewed[0].repeat_weeks, 1)
        self.close(w2.game)
        w3 = self.open_next()
        last = w3.renewal.renewed[0]
        self.assertEqual(last.repeat_weeks, 0)
        self.assertFalse(last.repeat_active)
        self.close(w3.game)
        w4 = self.open_next()
        self.assertEqual(w4.renewal.renewed, [])
        self.assertEqual(self.balance(self.player), 200 - 3 * 20)
