"""Tests for API endpoints."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.main import app
from api.routes.game import _games, _wallets


@pytest_asyncio.fixture
async def client():
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def new_game(client, **body) -> dict[str, str]:
    response = await client.post("/api/game/new", json=body or None)
    assert response.status_code == 200
    return {"X-Session-ID": response.json()["session_id"]}


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestNewGame:
    @pytest.mark.asyncio
    async def test_new_game_defaults(self, client):
        headers = await new_game(client)
        response = await client.get("/api/game/state", headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "betting"
        assert data["balance"] == 1000
        assert data["player_hands"] == []
        assert data["rules"] == {
            "decks": 6,
            "dealer_ruleset": "standard",
            "payout_ruleset": "standard",
        }

    @pytest.mark.asyncio
    async def test_new_game_with_rules(self, client):
        headers = await new_game(client, decks=2, dealerRuleset="aggressive", payoutRuleset="easy")
        data = (await client.get("/api/game/state", headers=headers)).json()
        assert data["rules"]["decks"] == 2
        assert data["rules"]["dealer_ruleset"] == "aggressive"
        assert data["cards_remaining"] == 104

    @pytest.mark.asyncio
    async def test_new_game_with_mode(self, client):
        headers = await new_game(client, mode="classic")
        data = (await client.get("/api/game/state", headers=headers)).json()
        assert data["rules"]["payout_ruleset"] == "easy"

    @pytest.mark.asyncio
    async def test_mode_with_explicit_rules(self, client):
        """Explicit rules and deck count override the mode preset."""
        headers = await new_game(client, mode="classic", decks=2, payout_ruleset="hard")
        data = (await client.get("/api/game/state", headers=headers)).json()
        assert data["rules"] == {
            "decks": 2,
            "dealer_ruleset": "conservative",
            "payout_ruleset": "hard",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"decks": 0},
            {"dealer_ruleset": "reckless"},
            {"payout_ruleset": "generous"},
            {"mode": "x"},
            {"mode": "classic", "decks": 0},
            {"mode": "classic", "payout_ruleset": "generous"},
        ],
    )
    async def test_malformed_config_is_422(self, client, body):
        response = await client.post("/api/game/new", json=body)
        assert response.status_code == 422
        assert response.json()["detail"]


class TestRound:
    """Betting and playing through the API."""

    @pytest.mark.asyncio
    async def test_place_bet(self, client):
        headers = await new_game(client)
        response = await client.post("/api/game/bet", json={"amount": 10}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["state"] in ("playing", "game_over")
        assert len(data["player_hands"][0]["cards"]) == 2
        assert data["dealer_showing"] is not None

    @pytest.mark.asyncio
    async def test_hole_card_hidden_while_playing(self, client, stack, make_cards):
        headers = await new_game(client)
        stack(_games[headers["X-Session-ID"]].shoe, make_cards("10", "9", "6", "7"))
        data = (await client.post("/api/game/bet", json={"amount": 10}, headers=headers)).json()
        assert data["state"] == "playing"
        assert len(data["dealer_hand"]["cards"]) == 1
        assert data["dealer_hand"]["value"] == 9

    @pytest.mark.asyncio
    async def test_bet_over_balance(self, client):
        headers = await new_game(client)
        response = await client.post("/api/game/bet", json={"amount": 5000}, headers=headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_bet_amount(self, client):
        headers = await new_game(client)
        response = await client.post("/api/game/bet", json={"amount": 0}, headers=headers)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_stand_settles_balance(self, client, stack, make_cards):
        headers = await new_game(client)
        stack(_games[headers["X-Session-ID"]].shoe, make_cards("10", "9", "8", "7", "K"))
        await client.post("/api/game/bet", json={"amount": 100}, headers=headers)

        response = await client.post("/api/game/action", json={"action": "stand"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "game_over"
        assert data["result"] == "win"
        assert data["balance"] == 1100
        assert data["last_round"] == {
            "hands_played": 1,
            "hands_won": 1,
            "blackjacks": 0,
            "coins_won": 100,
        }
        assert len(data["dealer_hand"]["cards"]) == 3

    @pytest.mark.asyncio
    async def test_surrender(self, client, stack, make_cards):
        headers = await new_game(client)
        stack(_games[headers["X-Session-ID"]].shoe, make_cards("10", "K", "6", "7"))
        await client.post("/api/game/bet", json={"amount": 100}, headers=headers)

        response = await client.post(
            "/api/game/action", json={"action": "surrender"}, headers=headers
        )
        assert response.json()["balance"] == 950

    @pytest.mark.asyncio
    async def test_ignored_action_is_400(self, client):
        headers = await new_game(client)
        response = await client.post("/api/game/action", json={"action": "hit"}, headers=headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_action_is_422(self, client):
        headers = await new_game(client)
        response = await client.post(
            "/api/game/action", json={"action": "insurance"}, headers=headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_double_needs_free_balance(self, client, stack, make_cards):
        headers = await new_game(client)
        stack(_games[headers["X-Session-ID"]].shoe, make_cards("6", "9", "5", "7"))
        await client.post("/api/game/bet", json={"amount": 600}, headers=headers)

        state = (await client.get("/api/game/state", headers=headers)).json()
        assert not state["can_double"]
        response = await client.post("/api/game/action", json={"action": "double"}, headers=headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_next_bet_after_round_over(self, client, stack, make_cards):
        headers = await new_game(client)
        stack(_games[headers["X-Session-ID"]].shoe, make_cards("10", "9", "6", "7"))
        await client.post("/api/game/bet", json={"amount": 10}, headers=headers)
        await client.post("/api/game/action", json={"action": "surrender"}, headers=headers)

        response = await client.post("/api/game/bet", json={"amount": 10}, headers=headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_reset(self, client):
        headers = await new_game(client)
        await client.post("/api/game/bet", json={"amount": 10}, headers=headers)
        response = await client.post("/api/game/reset", headers=headers)
        assert response.status_code == 200
        assert response.json()["state"] == "betting"
        assert response.json()["player_hands"] == []

    @pytest.mark.asyncio
    async def test_empty_shoe_is_409(self, client, stack, make_cards):
        headers = await new_game(client)
        game = _games[headers["X-Session-ID"]]
        stack(game.shoe, make_cards("10", "9", "2", "7"))
        await client.post("/api/game/bet", json={"amount": 10}, headers=headers)
        game.shoe._cards = []

        response = await client.post("/api/game/action", json={"action": "hit"}, headers=headers)
        assert response.status_code == 409

        state = (await client.get("/api/game/state", headers=headers)).json()
        assert state["state"] == "betting"
        assert state["balance"] == 1000

    @pytest.mark.asyncio
    async def test_game_reloads_from_store(self, client, stack, make_cards):
        """Evicting the in-process cache restores the session from the store."""
        headers = await new_game(client)
        session_id = headers["X-Session-ID"]
        stack(_games[session_id].shoe, make_cards("10", "9", "8", "7", "K"))
        await client.post("/api/game/bet", json={"amount": 100}, headers=headers)

        del _games[session_id]
        del _wallets[session_id]

        response = await client.post("/api/game/action", json={"action": "stand"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["balance"] == 1100


class TestAdviceAndCount:
    @pytest.mark.asyncio
    async def test_advice(self, client, stack, make_cards):
        headers = await new_game(client)
        shoe = _games[headers["X-Session-ID"]].shoe
        stack(shoe, make_cards("5"))
        shoe.deal_card()
        stack(shoe, make_cards("10", "K", "6", "7"))
        await client.post("/api/game/bet", json={"amount": 10}, headers=headers)

        response = await client.get("/api/game/advice", headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["optimal_move"] == "surrender"
        assert data["count_adjusted_move"] == "stand"
        assert data["true_count"] == 0.0
        assert set(data["expected_values"]) == {"hit", "stand", "double", "surrender"}

    @pytest.mark.asyncio
    async def test_advice_without_round(self, client):
        headers = await new_game(client)
        response = await client.get("/api/game/advice", headers=headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_count(self, client, stack, make_cards):
        headers = await new_game(client, decks=1)
        stack(_games[headers["X-Session-ID"]].shoe, make_cards("2", "3", "4", "5"))
        await client.post("/api/game/bet", json={"amount": 10}, headers=headers)

        data = (await client.get("/api/game/count", headers=headers)).json()
        assert data["running_count"] == 3
        assert data["cards_dealt"] == 3
        assert data["true_count"] == pytest.approx(3.2)
        assert data["take_insurance"]

    @pytest.mark.asyncio
    async def test_count_ignores_hole_card_until_shown(self, client, stack, make_cards):
        headers = await new_game(client, decks=1)
        stack(_games[headers["X-Session-ID"]].shoe, make_cards("9", "8", "7", "K", "9"))
        await client.post("/api/game/bet", json={"amount": 10}, headers=headers)

        playing = (await client.get("/api/game/count", headers=headers)).json()
        assert playing["running_count"] == 0
        assert playing["cards_dealt"] == 3

        await client.post("/api/game/action", json={"action": "stand"}, headers=headers)
        finished = (await client.get("/api/game/count", headers=headers)).json()
        assert finished["running_count"] == -1
        assert finished["cards_dealt"] == 4


class TestTraining:
    @pytest.mark.asyncio
    async def test_counting_drill(self, client):
        headers = {"X-Session-ID": "drill-session"}
        response = await client.post("/api/training/counting/start?decks=1", headers=headers)
        assert response.json()["cards_remaining"] == 52

        card = (await client.post("/api/training/counting/next", headers=headers)).json()
        assert card["cards_dealt"] == 1
        rank = card["card"]["rank"]
        expected = 1 if rank in "23456" else -1 if rank in ("10", "J", "Q", "K", "A") else 0

        guess = (
            await client.post("/api/training/counting/guess", json={"value": expected}, headers=headers)
        ).json()
        assert guess["correct"]
        assert guess["accuracy"] == 100.0

        status = (await client.post("/api/training/counting/reset", headers=headers)).json()
        assert status["cards_dealt"] == 0
        assert status["cards_remaining"] == 52

    @pytest.mark.asyncio
    async def test_counting_drill_not_started(self, client):
        response = await client.post(
            "/api/training/counting/next", headers={"X-Session-ID": "nobody"}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_strategy_drill(self, client):
        headers = {"X-Session-ID": "strategy-session"}
        drill = (await client.post("/api/training/strategy/drill", headers=headers)).json()
        assert len(drill["player_cards"]) == 2

        answer = (
            await client.post("/api/training/strategy/answer", json={"action": "hit"}, headers=headers)
        ).json()
        assert answer["correct"] == (answer["optimal_action"] == "hit")
        assert answer["accuracy"] in (0.0, 100.0)

        response = await client.post(
            "/api/training/strategy/answer", json={"action": "hit"}, headers=headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_deviation_lookup(self, client):
        response = await client.get(
            "/api/training/deviation",
            params={"player_total": 16, "dealer_upcard": "K", "true_count": 0.5},
        )
        data = response.json()
        assert data["situation"] == "16v10"
        assert data["deviation"] == "stand"
        assert data["basic_action"] == "hit"

    @pytest.mark.asyncio
    async def test_deviation_below_index(self, client):
        response = await client.get(
            "/api/training/deviation",
            params={"player_total": 20, "dealer_upcard": "6", "true_count": 3, "pair": True},
        )
        data = response.json()
        assert data["situation"] == "TTv6"
        assert data["deviation"] is None
        assert data["threshold"] == 4

    @pytest.mark.asyncio
    async def test_deviation_bad_upcard(self, client):
        response = await client.get(
            "/api/training/deviation",
            params={"player_total": 16, "dealer_upcard": "Z", "true_count": 0},
        )
        assert response.status_code == 422
