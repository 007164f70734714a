import logging

from .api import _resp, api_handler, require_game_id
from .dates import now_iso
from .errors import ValidationError
from .merge import merge_questions
from .schemas import parse_questions

logger = logging.getLogger(__name__)


@api_handler("add questions")
def handler(params, store):
    game_id = require_game_id(params, message="Game _id is required")
    if not params.get("questions"):
        raise ValidationError("Questions array is required")
    incoming = parse_questions(params["questions"])

    existing = store.find_one(game_id)
    now = now_iso()
    merged, added, updated = merge_questions((existing or {}).get("questions"), incoming, now)

    if existing:
        game = dict(existing, questions=merged, updatedAt=now)
        store.save(game, existing.get("version", 0))
        operation = "updated"
    else:
        # first write for this id creates the parent game
        game = {"_id": game_id, "questions": merged, "createdAt": now, "updatedAt": now}
        if params.get("name"):
            game["name"] = params["name"]
        store.save(game, None)
        operation = "created"

    logger.info("Game %s: %d question(s) added, %d updated", game_id, len(added), len(updated))

    return _resp({
        "success": True,
        "message": f"Successfully updated game {game_id} with {len(incoming)} question(s)",
        "gameId": game_id,
        "totalQuestions": len(merged),
        "addedQuestions": added,
        "updatedQuestions": updated,
        "addedCount": len(added),
        "updatedCount": len(updated),
        "operation": operation,
    })
