class GameError(Exception):
    """Base for failures reported back to the caller.

    ``expose`` decides whether the message reaches the response body or is
    replaced by a generic internal error.
    """

    status_code = 500
    expose = True

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(GameError):
    pass


class InvalidQuestionSchema(ValidationError):
    def __init__(self, question_id, field, rule):
        self.question_id = question_id
        self.field = field
        super().__init__(f'Question "{question_id}": {field} {rule}')


class ConfigurationError(GameError):
    status_code = 400


class NotFoundError(GameError):
    # only get_game_by_id answers 404, elsewhere a missing game is a failed request
    status_code = 404


class ConcurrentModification(GameError):
    pass


class AllocationExhausted(GameError):
    expose = False


class StoreError(GameError):
    expose = False
