"""Tests for the WebSocket chat"""

import json

import pytest
from fastapi.testclient import TestClient

from bamboozled.main import app
from bamboozled.models.chat import IncomingMessage
from bamboozled.websocket.chat_handler import HELP_TEXT, ChatSession, initialize_user


class FakeWebSocket:
    """Collects what the session sends"""

    def __init__(self):
        self.sent = []

    async def send_json(self, data):
        self.sent.append(data)


@pytest.fixture
def websocket(db):
    return FakeWebSocket()


@pytest.fixture
def session(websocket):
    return ChatSession(websocket)


def command(user_id, content):
    return json.dumps({"type": "command", "content": content, "userId": user_id})


def contents(websocket):
    return [message["content"] for message in websocket.sent]


class TestInitializeUser:
    """Test cases for resolving the chat user"""

    async def test_requires_name(self, db):
        result = await initialize_user(IncomingMessage(type="init", user_name="   "))

        assert result.success is False
        assert result.error == "Please enter a username"
        assert result.error_type == "INVALID_INPUT"

    async def test_name_too_long(self, db):
        result = await initialize_user(IncomingMessage(type="init", user_name="x" * 51))

        assert result.error == "Username must be 50 characters or less"

    async def test_new_user_by_name(self, db):
        result = await initialize_user(IncomingMessage(type="init", user_name="Alice"))

        assert result.success is True
        assert result.user.user_id.startswith("web_")

    async def test_existing_name_without_id(self, db, make_user):
        alice = await make_user("Alice")

        result = await initialize_user(IncomingMessage(type="init", user_name="Alice"))

        assert result.user.user_id == alice.user_id

    async def test_unknown_id_is_created(self, db):
        result = await initialize_user(IncomingMessage(type="init", user_id="web_1_abc", user_name="Bob"))

        assert result.user.user_id == "web_1_abc"

    async def test_unknown_id_with_taken_name(self, db, make_user):
        await make_user("Bob")

        result = await initialize_user(IncomingMessage(type="init", user_id="web_1_abc", user_name="Bob"))

        assert result.error_type == "DISPLAY_NAME_TAKEN"
        assert result.error == 'The username "Bob" is already taken. Please choose a different username.'

    async def test_known_id_same_name(self, db, make_user):
        bob = await make_user("Bob", user_id="web_1_abc")

        result = await initialize_user(IncomingMessage(type="init", user_id="web_1_abc", user_name="Bob"))

        assert result.user == bob

    async def test_known_id_rename(self, db, make_user):
        await make_user("Bob", user_id="web_1_abc")

        result = await initialize_user(IncomingMessage(type="init", user_id="web_1_abc", user_name="Robert"))

        assert result.user.display_name == "Robert"

    async def test_known_id_rename_to_taken_name(self, db, make_user):
        await make_user("Bob", user_id="web_1_abc")
        await make_user("Carol")

        result = await initialize_user(IncomingMessage(type="init", user_id="web_1_abc", user_name="Carol"))

        assert result.error == 'The username "Carol" is already taken. Your username is "Bob".'


class TestChatSession:
    """Test cases for chat message handling"""

    async def test_invalid_json(self, session, websocket):
        await session.handle_raw("{nope")

        assert contents(websocket) == ["Error: Invalid message format"]
        assert websocket.sent[0]["type"] == "bot"
        assert websocket.sent[0]["timestamp"].endswith("Z")

    async def test_unknown_message_type(self, session, websocket):
        await session.handle_raw(json.dumps({"type": "shout", "content": "hi"}))
        assert contents(websocket) == ["Error: Invalid message format"]

    async def test_init_welcomes_and_shows_puzzle(self, session, websocket, make_puzzle):
        puzzle = await make_puzzle(active=True)

        await session.handle_raw(json.dumps({"type": "init", "userName": "Alice"}))

        welcome, puzzle_message = websocket.sent
        assert welcome["content"].startswith("Welcome, Alice! Type your guess")
        assert welcome["userId"].startswith("web_")
        assert welcome["metadata"] == {"moodTier": 0}
        assert puzzle_message["content"] == "Here's the current puzzle:"
        assert puzzle_message["metadata"] == {
            "imageUrl": f"/api/puzzle/{puzzle.puzzle_id}/image",
            "isCommand": True
        }

    async def test_init_failure(self, session, websocket):
        await session.handle_raw(json.dumps({"type": "init", "userName": ""}))

        assert websocket.sent == [{
            "type": "error",
            "content": "Please enter a username",
            "timestamp": websocket.sent[0]["timestamp"],
            "metadata": {"errorType": "INVALID_INPUT"}
        }]

    async def test_command_requires_user(self, session, websocket):
        await session.handle_raw(json.dumps({"type": "command", "content": "/help"}))
        assert contents(websocket) == ["Error: User ID not found. Please refresh the page."]

    async def test_guess_requires_user(self, session, websocket):
        await session.handle_raw(json.dumps({"type": "message", "content": "an answer"}))
        assert contents(websocket) == ["Error: User ID not found. Please refresh the page."]

    async def test_help(self, session, websocket, make_user):
        user = await make_user()

        await session.handle_raw(command(user.user_id, "/help"))

        assert contents(websocket) == [HELP_TEXT]
        assert websocket.sent[0]["metadata"] == {"isCommand": True}

    async def test_slash_message_is_a_command(self, session, websocket, make_user):
        user = await make_user()

        await session.handle_raw(json.dumps({"type": "message", "content": "/HELP", "userId": user.user_id}))

        assert contents(websocket) == [HELP_TEXT]

    async def test_unknown_command(self, session, websocket, make_user):
        user = await make_user()

        await session.handle_raw(command(user.user_id, "/dance"))

        assert contents(websocket) == ["Unknown command. Type /help for available commands."]

    async def test_puzzle_command_without_puzzle(self, session, websocket, make_user):
        user = await make_user()

        await session.handle_raw(command(user.user_id, "/bamboozled"))

        assert contents(websocket) == ["No active puzzle available."]

    async def test_stats(self, session, websocket, make_user):
        user = await make_user(hint_coins=4)

        await session.handle_raw(command(user.user_id, "/stats"))

        content = contents(websocket)[0]
        assert content.startswith("📊 Your Stats:\n- Total Solves: 0\n")
        assert "- Avg Guesses/Solve: 0.00\n" in content
        assert content.endswith("- Mood Tier: 0 (The Skeptic)\n- 💰 Hint Coins: 4")

    async def test_stats_unknown_user(self, session, websocket):
        await session.handle_raw(command("nobody", "/stats"))
        assert contents(websocket) == ["Could not find your stats."]

    async def test_empty_leaderboard(self, session, websocket, make_user, make_puzzle):
        user = await make_user()
        await make_puzzle(active=True)

        await session.handle_raw(command(user.user_id, "/leaderboard"))

        assert contents(websocket) == ["No one has solved the puzzle yet. Be the first!"]

    async def test_alltime(self, session, websocket, make_user):
        user = await make_user("Alice")
        await make_user("Bob")

        await session.handle_raw(command(user.user_id, "/alltime"))

        assert contents(websocket) == ["🏅 All-Time Leaderboard:\n1. Alice - 0 solves\n2. Bob - 0 solves"]

    async def test_botmood(self, session, websocket, make_user):
        user = await make_user()

        await session.handle_raw(command(user.user_id, "/botmood"))

        content = contents(websocket)[0]
        assert "Current Tier: 0 - The Skeptic\n" in content
        assert "\n\nYour Progress:\n- Streak: 0 weeks\n- Total Solves: 0\n\n" in content
        assert content.endswith(
            "Next Tier: 1 - The Indifferent\nNeeded: 1 more streak weeks OR 3 more solves"
        )

    async def test_botmood_max_tier(self, session, websocket, make_user):
        user = await make_user(mood_tier=6)

        await session.handle_raw(command(user.user_id, "/botmood"))

        assert contents(websocket)[0].endswith("You've reached the maximum tier! 🏆")

    async def test_hint_without_coins_shows_pricing(self, session, websocket, make_user, make_puzzle):
        user = await make_user()
        await make_puzzle(active=True)

        await session.handle_raw(command(user.user_id, "/hint"))

        refusal, pricing = contents(websocket)
        assert refusal == "Not enough hint coins! You have 0, but level 1 costs 1."
        assert pricing.startswith("💰 Hint Pricing:\nLevel 1: 1 coins (Vague hint)\n")
        assert "- First place finish: +2 coins" in pricing

    async def test_hint_with_level(self, session, websocket, make_user, make_puzzle):
        user = await make_user(hint_coins=5)
        await make_puzzle(active=True)

        await session.handle_raw(command(user.user_id, "/hint 2"))

        assert contents(websocket)[0].startswith("The Skeptic reveals hint level 2:\n\n")

    async def test_wrong_guess(self, session, websocket, make_user, make_puzzle):
        user = await make_user("Alice")
        await make_puzzle(active=True)

        await session.handle_raw(json.dumps({"type": "message", "content": "nope", "userId": user.user_id}))

        assert websocket.sent == [{
            "type": "bot",
            "content": "Nope. Try actually reading the puzzle, Alice.",
            "timestamp": websocket.sent[0]["timestamp"],
            "metadata": {"moodTier": 0}
        }]

    async def test_correct_guess(self, session, websocket, make_user, make_puzzle):
        user = await make_user("Alice")
        await make_puzzle(active=True)

        await session.handle_raw(json.dumps({
            "type": "message", "content": "Falling Temperature", "userId": user.user_id
        }))

        reply, achievements, leaderboard = websocket.sent
        assert reply["content"] == "Correct, I suppose. Don't let it go to your head, Alice."
        assert achievements["content"].startswith("🎉 *New Achievement(s)!*\n")
        keys = {a["achievement_key"] for a in achievements["metadata"]["achievements"]}
        assert "FIRST_BLOOD" in keys
        assert leaderboard["content"] == "🏆 Weekly Leaderboard:\n1. Alice - 1 guesses"

    async def test_tier_drop_has_no_tier_up_notice(self, session, websocket, make_user, make_puzzle):
        user = await make_user("Alice", mood_tier=3)
        await make_puzzle(active=True)

        await session.handle_raw(json.dumps({
            "type": "message", "content": "Falling Temperature", "userId": user.user_id
        }))

        assert not any("Tier Up" in c for c in contents(websocket))


class TestChatEndpoint:
    """The /ws endpoint end to end"""

    async def test_conversation(self, db, make_user):
        client = TestClient(app)

        with client.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            assert ws.receive_json()["content"] == "Error: Invalid message format"

            ws.send_text(json.dumps({"type": "init", "userName": "Alice"}))
            welcome = ws.receive_json()
            assert welcome["content"].startswith("Welcome, Alice!")

            # No active puzzle: the service error is reported to the client
            ws.send_text(json.dumps({"type": "message", "content": "guess", "userId": welcome["userId"]}))
            assert ws.receive_json()["content"] == "Error: No active puzzle available"
