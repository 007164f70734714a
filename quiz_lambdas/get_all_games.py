from .api import _resp, api_handler


@api_handler("get all games")
def handler(params, store):
    games = store.find_all()
    return _resp({"success": True, "games": games, "count": len(games)})
