import logging

from .api import _resp, api_handler, require_game_id
from .dates import now_iso, parse_timestamp
from .errors import NotFoundError, ValidationError
from .merge import merge_questions
from .schemas import GameFields, parse_questions, validate

logger = logging.getLogger(__name__)


def check_date_order(start, end, existing):
    """Validate whichever start/end pair will be in effect after the update."""
    if start and end:
        if start >= end:
            raise ValidationError("Start date must be before end date")
    elif start:
        stored_end = parse_timestamp(existing.get("endDate"))
        if stored_end and start >= stored_end:
            raise ValidationError("Start date must be before existing end date")
    elif end:
        stored_start = parse_timestamp(existing.get("startDate"))
        if stored_start and stored_start >= end:
            raise ValidationError("Existing start date must be before new end date")


@api_handler("update game")
def handler(params, store):
    game_id = require_game_id(params, message="Game ID is required for updating a game")

    existing = store.find_one(game_id)
    if not existing:
        raise NotFoundError("Game with this ID does not exist")

    fields = validate(GameFields, params)
    check_date_order(fields.startDate, fields.endDate, existing)

    now = now_iso()
    changes = {"updatedAt": now}
    if fields.title is not None and fields.title != existing.get("title"):
        other = store.find_by_title(fields.title)
        if other and other["_id"] != game_id:
            raise ValidationError("Game with this title already exists")
        changes["title"] = fields.title
    for name in ("description", "tags", "publishStatus"):
        value = getattr(fields, name)
        if value is not None:
            changes[name] = value
    if fields.startDate:
        changes["startDate"] = fields.startDate.isoformat()
    if fields.endDate:
        changes["endDate"] = fields.endDate.isoformat()

    stats = {}
    if fields.questions is not None:
        merged, added, updated = merge_questions(
            existing.get("questions"), parse_questions(fields.questions), now)
        changes["questions"] = merged
        stats = {
            "totalQuestions": len(merged),
            "addedQuestions": added,
            "updatedQuestions": updated,
            "addedCount": len(added),
            "updatedCount": len(updated),
        }

    game = store.update_fields(game_id, changes, existing.get("version", 0))
    logger.info("Game %s updated: %s", game_id, ", ".join(sorted(changes)))

    return _resp({
        "success": True,
        "message": "Game updated successfully",
        "_id": game_id,
        "game": game,
        **stats,
    })
