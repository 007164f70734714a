"""Game PIN allocation.

PINs are 6-digit join codes. Uniqueness is checked against a full scan of
the pins already stored; the active game count stays small next to the
900,000 possible values, so collisions are rare and the scan is cheap.
"""
import logging
import random

from . import config
from .dates import now_iso
from .errors import AllocationExhausted

logger = logging.getLogger(__name__)

_rng = random.SystemRandom()


def draw_pin(existing_pins, rng=None, max_attempts=None):
    rng = rng or _rng
    max_attempts = config.PIN_MAX_ATTEMPTS if max_attempts is None else max_attempts
    for _ in range(max_attempts):
        pin = f"{rng.randint(config.PIN_MIN, config.PIN_MAX):06d}"
        if pin not in existing_pins:
            return pin
    raise AllocationExhausted(f"Unable to generate unique pin after {max_attempts} attempts")


def allocate_pin(store, game_id, rng=None, max_attempts=None):
    """Return the game's PIN, assigning a fresh unique one if it has none."""
    game = store.find_one(game_id)
    if game and game.get('gamePin'):
        logger.info("Game %s already has pin %s", game_id, game['gamePin'])
        return game['gamePin']

    existing = store.all_pins()
    logger.info("Found %d existing game pins", len(existing))
    pin = draw_pin(existing, rng=rng, max_attempts=max_attempts)

    if not store.set_pin(game_id, pin, now_iso()):
        # another request assigned one between our read and write
        winner = store.find_one(game_id)['gamePin']
        logger.info("Game %s was given pin %s concurrently", game_id, winner)
        return winner

    logger.info("Game %s updated with pin %s", game_id, pin)
    return pin
