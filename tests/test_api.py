"""
HTTP tests through the Flask test client: response envelope, status codes
and error mapping.

Run with:
    python -m pytest tests/test_api.py
"""
import unittest

from sqlalchemy.exc import IntegrityError

from dead_pigeons import create_app
from dead_pigeons.error_handlers import conflict_from_integrity_error


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        self.app = create_app({"DATABASE_URL": "sqlite://", "TESTING": True, "NUMBER_POOL_MAX": 16})
        self.client = self.app.test_client()
        self._mobile = 0

    def tearDown(self):
        self.app.extensions["engine"].dispose()

    # Builders

    def post(self, url, payload=None):
        return self.client.post(url, json=payload if payload is not None else {})

    def data(self, response, status=200):
        self.assertEqual(response.status_code, status, response.get_json())
        body = response.get_json()
        self.assertTrue(body["success"])
        self.assertIsNone(body["error"])
        return body["data"]

    def error(self, response, status):
        self.assertEqual(response.status_code, status, response.get_json())
        body = response.get_json()
        self.assertFalse(body["success"])
        self.assertIsNone(body["data"])
        return body["error"]

    def new_player(self, name="Ada Lovelace", email="ada@club.example", active=True):
        player = self.data(
            self.post("/players", {"full_name": name, "email": email, "phone": "+45 1234 5678"}), 201
        )
        if active:
            player = self.data(self.post(f"/players/{player['id']}/activate"))
        return player

    def fund(self, player, amount):
        self._mobile += 1
        created = self.data(
            self.post(
                f"/players/{player['id']}/transactions",
                {"mobile_pay_number": f"MP-{self._mobile:04d}", "amount": amount},
            ),
            201,
        )
        return self.data(self.post(f"/transactions/{created['id']}/approve"))

    def open_round(self, payload=None):
        return self.data(self.post("/games/open", payload), 201)


class TestHealth(ApiTestCase):

    def test_health(self):
        body = self.data(self.client.get("/health"))
        self.assertEqual((body["status"], body["database"], body["active_game"]), ("ok", "ok", None))

    def test_health_reports_open_round(self):
        game = self.open_round({"week_number": 5, "year": 2026})["game"]
        body = self.data(self.client.get("/health"))
        self.assertEqual(body["active_game"], {"id": game["id"], "week_number": 5, "year": 2026})

    def test_wrong_method(self):
        err = self.error(self.client.delete("/games/active"), 405)
        self.assertEqual(err["code"], "method_not_allowed")

    def test_unknown_route_uses_envelope(self):
        err = self.error(self.client.get("/nope"), 404)
        self.assertEqual(err["code"], "not_found")


class TestPlayersApi(ApiTestCase):

    def test_new_player_starts_inactive(self):
        player = self.new_player(active=False)
        self.assertFalse(player["is_active"])
        listed = self.data(self.client.get("/players?is_active=false"))
        self.assertEqual([p["id"] for p in listed], [player["id"]])

    def test_bad_email_is_rejected(self):
        err = self.error(
            self.post("/players", {"full_name": "X", "email": "not-an-email", "phone": "1"}), 400
        )
        self.assertEqual(err["code"], "validation_error")
        self.assertIn("email", err["details"])
        self.assertEqual(err["details"]["kind"], "invalid_input")

    def test_unknown_player(self):
        err = self.error(self.client.get("/players/404"), 404)
        self.assertEqual(err["code"], "player_not_found")
        self.assertEqual(err["details"]["kind"], "not_found")


class TestTransactionsApi(ApiTestCase):

    def test_deposit_lifecycle_and_balance(self):
        player = self.new_player()
        approved = self.fund(player, 100)
        self.assertEqual(approved["status"], "Approved")
        self.assertIsNotNone(approved["approved_at"])

        pending = self.data(
            self.post(f"/players/{player['id']}/transactions", {"mobile_pay_number": "MP-9999", "amount": 50}),
            201,
        )
        self.assertEqual(pending["status"], "Pending")
        self.assertEqual([t["id"] for t in self.data(self.client.get("/transactions/pending"))], [pending["id"]])

        balance = self.data(self.client.get(f"/players/{player['id']}/balance"))
        self.assertEqual(balance, {"player_id": player["id"], "deposited": 100, "spent": 0, "balance": 100})

    def test_approving_twice_is_a_conflict(self):
        player = self.new_player()
        approved = self.fund(player, 100)
        err = self.error(self.post(f"/transactions/{approved['id']}/approve"), 409)
        self.assertEqual(err["details"]["kind"], "state_conflict")
        self.assertEqual(err["details"]["status"], "Approved")

    def test_reject_with_reason(self):
        player = self.new_player()
        created = self.data(
            self.post(f"/players/{player['id']}/transactions", {"mobile_pay_number": "MP-0001", "amount": 40}),
            201,
        )
        rejected = self.data(self.post(f"/transactions/{created['id']}/reject", {"reason": "no payment seen"}))
        self.assertEqual(rejected["status"], "Rejected")
        self.assertEqual(rejected["rejection_reason"], "no payment seen")
        self.assertEqual(self.data(self.client.get(f"/players/{player['id']}/balance"))["balance"], 0)

    def test_non_positive_amount(self):
        player = self.new_player()
        err = self.error(
            self.post(f"/players/{player['id']}/transactions", {"mobile_pay_number": "MP-0001", "amount": 0}),
            400,
        )
        self.assertIn("amount", err["details"])


class TestGamesApi(ApiTestCase):

    def test_no_active_round(self):
        err = self.error(self.client.get("/games/active"), 404)
        self.assertEqual(err["code"], "no_active_round")

    def test_open_buy_close(self):
        player = self.new_player()
        self.fund(player, 100)
        opened = self.open_round({"week_number": 5, "year": 2026})
        game = opened["game"]
        self.assertEqual((game["week_number"], game["year"], game["is_active"]), (5, 2026, True))
        self.assertEqual(opened["renewed_boards"], [])

        board = self.data(
            self.post(f"/players/{player['id']}/boards", {"game_id": game["id"], "numbers": [5, 1, 4, 3, 2]}),
            201,
        )
        self.assertEqual(board["numbers"], [1, 2, 3, 4, 5])
        self.assertEqual(board["price"], 20)
        self.assertEqual(self.data(self.client.get(f"/players/{player['id']}/balance"))["balance"], 80)

        summary = self.data(self.post(f"/games/{game['id']}/winning-numbers", {"winning_numbers": [3, 2, 1]}))
        self.assertEqual(summary["winning_numbers"], [1, 2, 3])
        self.assertEqual((summary["total_boards"], summary["winning_boards"], summary["digital_revenue"]), (1, 1, 20))

        self.assertEqual(self.data(self.client.get(f"/games/{game['id']}/summary")), summary)
        history = self.data(self.client.get("/games/history"))
        self.assertEqual([g["id"] for g in history], [game["id"]])

        err = self.error(self.post(f"/games/{game['id']}/winning-numbers", {"winning_numbers": [1, 2, 3]}), 409)
        self.assertEqual(err["code"], "round_already_closed")

    def test_opening_twice_is_a_conflict(self):
        self.open_round({"week_number": 5, "year": 2026})
        err = self.error(self.post("/games/open"), 409)
        self.assertEqual(err["code"], "round_already_active")

    def test_insufficient_balance(self):
        player = self.new_player()
        self.fund(player, 30)
        game = self.open_round({"week_number": 5, "year": 2026})["game"]
        err = self.error(
            self.post(f"/players/{player['id']}/boards", {"game_id": game["id"], "numbers": [1, 2, 3, 4, 5, 6]}),
            422,
        )
        self.assertEqual(err["code"], "insufficient_balance")
        self.assertEqual(err["details"]["kind"], "policy_violation")
        self.assertEqual(self.data(self.client.get(f"/games/{game['id']}/boards")), [])

    def test_number_out_of_pool(self):
        player = self.new_player()
        self.fund(player, 100)
        game = self.open_round({"week_number": 5, "year": 2026})["game"]
        err = self.error(
            self.post(f"/players/{player['id']}/boards", {"game_id": game["id"], "numbers": [1, 2, 3, 4, 17]}),
            400,
        )
        self.assertEqual(err["code"], "invalid_number_selection")

    def test_malformed_winning_numbers(self):
        game = self.open_round({"week_number": 5, "year": 2026})["game"]
        err = self.error(self.post(f"/games/{game['id']}/winning-numbers", {"winning_numbers": [1, 1, 2]}), 400)
        self.assertIn("winning_numbers", err["details"])
        self.assertTrue(self.data(self.client.get(f"/games/{game['id']}"))["is_active"])

    def test_repeating_board_is_renewed_by_open(self):
        player = self.new_player()
        self.fund(player, 100)
        game = self.open_round({"week_number": 52, "year": 2026})["game"]
        board = self.data(
            self.post(
                f"/players/{player['id']}/boards",
                {"game_id": game["id"], "numbers": [1, 2, 3, 4, 5], "repeat_weeks": 2},
            ),
            201,
        )
        self.data(self.post(f"/games/{game['id']}/winning-numbers", {"winning_numbers": [7, 8, 9]}))

        opened = self.open_round()
        self.assertEqual((opened["game"]["week_number"], opened["game"]["year"]), (1, 2027))
        [renewed] = opened["renewed_boards"]
        self.assertEqual(renewed["renewed_from_id"], board["id"])
        self.assertEqual(renewed["repeat_weeks"], 1)
        self.assertEqual(self.data(self.client.get(f"/players/{player['id']}/balance"))["balance"], 60)

        history = self.data(self.client.get(f"/players/{player['id']}/history"))
        self.assertEqual([h["game_id"] for h in history], [opened["game"]["id"], game["id"]])
        self.assertFalse(history[1]["is_winning"])


class TestConstraintMapping(unittest.TestCase):
    """Unique-constraint races surface as the matching conflict code."""

    def _integrity(self, message):
        return IntegrityError("INSERT ...", {}, Exception(message))

    def test_second_active_round_sqlite(self):
        conflict = conflict_from_integrity_error(self._integrity("UNIQUE constraint failed: games.is_active"))
        self.assertEqual((conflict.code, conflict.status_code), ("round_already_active", 409))

    def test_duplicate_renewal_postgres(self):
        conflict = conflict_from_integrity_error(
            self._integrity('duplicate key value violates unique constraint "uq_boards_renewal"')
        )
        self.assertEqual(conflict.code, "board_already_renewed")

    def test_duplicate_mobile_pay_number(self):
        conflict = conflict_from_integrity_error(
            self._integrity("UNIQUE constraint failed: transactions.mobile_pay_number")
        )
        self.assertEqual(conflict.code, "duplicate_mobile_pay_number")

    def test_unknown_constraint_is_generic_conflict(self):
        conflict = conflict_from_integrity_error(self._integrity("something else"))
        self.assertEqual(conflict.code, "conflict")
        self.assertEqual(conflict.kind, "state_conflict")
