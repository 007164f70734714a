import copy
import json

import pytest

from quiz_lambdas.errors import ConcurrentModification, ValidationError


class MemoryGameStore:
    """In-memory stand-in for ``GameStore`` with the same version checks."""

    def __init__(self, games=None):
        self.games = {g["_id"]: copy.deepcopy(g) for g in games or []}
        self.writes = []

    def find_one(self, game_id):
        game = self.games.get(game_id)
        return copy.deepcopy(game) if game else None

    def find_by_title(self, title):
        for game in self.games.values():
            if game.get("title") == title:
                return copy.deepcopy(game)
        return None

    def find_all(self):
        return [copy.deepcopy(g) for g in self.games.values()]

    def all_pins(self):
        return {g["gamePin"] for g in self.games.values() if isinstance(g.get("gamePin"), str)}

    def insert_one(self, doc):
        if doc["_id"] in self.games:
            raise ValidationError("Game with this ID already exists")
        item = dict(copy.deepcopy(doc), version=1)
        self.games[doc["_id"]] = item
        self.writes.append(("insert", doc["_id"]))
        return copy.deepcopy(item)

    def set_pin(self, game_id, pin, now):
        game = self.games.setdefault(game_id, {"_id": game_id})
        if game.get("gamePin"):
            return False
        game.update(gamePin=pin, updatedAt=now)
        self.writes.append(("set_pin", game_id))
        return True

    def _check_version(self, game_id, expected_version):
        current = self.games.get(game_id)
        if expected_version is None:
            ok = current is None
        else:
            ok = current is not None and current.get("version", 0) == expected_version
        if not ok:
            raise ConcurrentModification(f"Game {game_id} was modified concurrently, retry the request")

    def save(self, doc, expected_version):
        self._check_version(doc["_id"], expected_version)
        item = dict(copy.deepcopy(doc), version=(expected_version or 0) + 1)
        self.games[doc["_id"]] = item
        self.writes.append(("save", doc["_id"]))
        return copy.deepcopy(item)

    def update_fields(self, game_id, fields, expected_version):
        self._check_version(game_id, expected_version)
        game = self.games[game_id]
        game.update(copy.deepcopy(fields))
        game["version"] = (expected_version or 0) + 1
        self.writes.append(("update", game_id))
        return copy.deepcopy(game)


@pytest.fixture
def store():
    return MemoryGameStore()


@pytest.fixture
def sample_game():
    return {
        "_id": "game_1",
        "title": "Capitals",
        "description": "European capitals",
        "tags": ["geo"],
        "publishStatus": False,
        "startDate": "2024-01-01T00:00:00+00:00",
        "endDate": "2024-01-10T00:00:00+00:00",
        "questions": [],
        "users": [],
        "createdAt": "2023-12-01T00:00:00+00:00",
        "updatedAt": "2023-12-01T00:00:00+00:00",
        "version": 1,
    }


def call(module, params, store):
    """Invoke a handler directly and return ``(status, decoded body)``."""
    resp = module.handler(params, None, store=store)
    return resp["statusCode"], json.loads(resp["body"])
