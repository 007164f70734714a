import logging
import uuid

from .api import _resp, api_handler, require_game_id
from .dates import now_iso
from .errors import ValidationError
from .merge import merge_questions
from .schemas import NewGame, parse_questions, validate

logger = logging.getLogger(__name__)


def new_game_id():
    return f"game_{uuid.uuid4().hex}"


@api_handler("create game")
def handler(params, store):
    fields = validate(NewGame, params)
    game_id = require_game_id(params) if params.get("_id") else new_game_id()

    if store.find_one(game_id):
        raise ValidationError("Game with this ID already exists")
    if store.find_by_title(fields.title):
        raise ValidationError("Game with this title already exists")

    now = now_iso()
    questions = []
    if fields.questions is not None:
        questions, _, _ = merge_questions([], parse_questions(fields.questions), now)

    doc = {
        "_id": game_id,
        "title": fields.title,
        "description": fields.description,
        "tags": fields.tags or [],
        "publishStatus": fields.publishStatus,
        "startDate": fields.startDate.isoformat(),
        "endDate": fields.endDate.isoformat(),
        "questions": questions,
        "users": [],
        "createdAt": now,
        "updatedAt": now,
    }
    game = store.insert_one(doc)
    logger.info("Game %s created with %d question(s)", game_id, len(questions))

    return _resp({
        "success": True,
        "message": "Game created successfully",
        "_id": game_id,
        "game": game,
    })
