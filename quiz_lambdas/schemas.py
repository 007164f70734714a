"""
Request schemas

Pydantic models for the payloads the handlers accept. Unknown question and
user fields are kept so they flow through to the stored document.
"""
from datetime import datetime
from typing import Annotated, Any, List, Optional, Union

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from .answers import normalize_answers
from .dates import parse_timestamp
from .errors import ValidationError


def describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = '.'.join(str(p) for p in err['loc'])
        parts.append(f"{loc}: {err['msg']}" if loc else err['msg'])
    return '; '.join(parts)


def _not_blank(v):
    if not v.strip():
        raise ValueError('must not be blank')
    return v


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


def parse_tags(tags) -> List[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        return [tags.strip()] if tags.strip() else []
    if not isinstance(tags, list):
        raise ValueError('tags must be a list of strings')
    for tag in tags:
        if tag is not None and not isinstance(tag, str):
            raise ValueError('tags must be a list of strings')
    return [tag.strip() for tag in tags if tag and tag.strip()]


def parse_publish_status(value) -> bool:
    return value is True or value == 'true'


def _parse_date(value, field):
    dt = parse_timestamp(value)
    if dt is None:
        raise ValueError(f'Invalid {field} format. Please use a valid date format.')
    return dt


class Question(BaseModel):
    model_config = ConfigDict(extra='allow', allow_inf_nan=False)

    questionId: NonBlankStr
    questionType: NonBlankStr
    questionText: NonBlankStr
    options: List[str] = Field(..., min_length=1)
    correctAnswer: Any = None
    correctAnswers: Any = None
    timeLimit: Optional[Union[PositiveInt, PositiveFloat]] = None


class User(BaseModel):
    model_config = ConfigDict(extra='allow', allow_inf_nan=False)

    userName: NonBlankStr
    score: Optional[Union[NonNegativeInt, NonNegativeFloat]] = None
    rank: Optional[PositiveInt] = None
    avatar: Optional[NonBlankStr] = None


class GameFields(BaseModel):
    """Mutable game fields; everything optional so it also serves updates."""

    title: Optional[NonBlankStr] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    publishStatus: Optional[bool] = Field(None, validation_alias=AliasChoices('publishStatus', 'status'))
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    questions: Optional[list] = None

    @field_validator('tags', mode='before')
    @classmethod
    def _tags(cls, v):
        return None if v is None else parse_tags(v)

    @field_validator('publishStatus', mode='before')
    @classmethod
    def _publish_status(cls, v):
        return None if v is None else parse_publish_status(v)

    @field_validator('startDate', 'endDate', mode='before')
    @classmethod
    def _dates(cls, v, info):
        return None if v is None else _parse_date(v, info.field_name)

    @model_validator(mode='after')
    def _date_order(self):
        if self.startDate and self.endDate and self.startDate >= self.endDate:
            raise ValueError('Start date must be before end date')
        return self


class NewGame(GameFields):
    title: NonBlankStr
    description: str
    publishStatus: bool = Field(False, validation_alias=AliasChoices('publishStatus', 'status'))
    startDate: datetime
    endDate: datetime

    @field_validator('publishStatus', mode='before')
    @classmethod
    def _publish_status(cls, v):
        # anything but true or "true" creates an unpublished game
        return parse_publish_status(v)


def validate(model, params):
    try:
        return model.model_validate(params)
    except PydanticValidationError as e:
        raise ValidationError(describe(e))


def parse_question(raw) -> dict:
    if not isinstance(raw, dict):
        raise ValidationError('Each question must be an object')
    try:
        q = Question.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError(f'Invalid question "{raw.get("questionId")}": {describe(e)}')
    indices = normalize_answers(q.questionId, q.questionType, q.options, q.correctAnswer, q.correctAnswers)
    doc = q.model_dump(exclude_none=True, exclude={'correctAnswer', 'correctAnswers'})
    doc['correctAnswers'] = indices
    return doc


def parse_questions(raw) -> List[dict]:
    if not isinstance(raw, list):
        raise ValidationError('Questions must be an array')
    questions = [parse_question(q) for q in raw]
    ids = [q['questionId'] for q in questions]
    dupes = sorted({i for i in ids if ids.count(i) > 1})
    if dupes:
        raise ValidationError(f'Duplicate questionId in request: {", ".join(dupes)}')
    return questions


def parse_user(raw) -> dict:
    if not isinstance(raw, dict):
        raise ValidationError('User must be provided as an object')
    try:
        user = User.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError(f'Invalid user "{raw.get("userName")}": {describe(e)}')
    return user.model_dump(exclude_none=True)
