from .api import _resp, api_handler, require_game_id
from .pins import allocate_pin


@api_handler("generate game pin")
def handler(params, store):
    game_id = require_game_id(params, message="Game _id is required")
    pin = allocate_pin(store, game_id)
    return _resp({"gamepin": pin, "_id": game_id})
