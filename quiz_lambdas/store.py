"""DynamoDB-backed game collection.

Every handler talks to the games table through a ``GameStore``. Handlers get
one injected (tests use an in-memory double) or open one with
``acquire_store()``, which releases the client it created on every exit path.

Writes that follow a read of the same game are conditioned on the ``version``
attribute read earlier, so two requests racing on one game cannot silently
drop each other's changes: the loser gets ``ConcurrentModification``.
"""
import json
import logging
from contextlib import contextmanager
from decimal import Decimal

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from . import config
from .errors import ConcurrentModification, ConfigurationError, StoreError, ValidationError

logger = logging.getLogger(__name__)

KEY = '_id'


def _to_item(value):
    # the DynamoDB serializer rejects floats
    return json.loads(json.dumps(value), parse_float=Decimal)


def _coerce(v):
    if isinstance(v, Decimal):
        return int(v) if v == v.to_integral_value() else float(v)
    if isinstance(v, dict):
        return {k: _coerce(x) for k, x in v.items()}
    if isinstance(v, list):
        return [_coerce(x) for x in v]
    return v


def _conditional_failure(exc):
    return exc.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException'


def _version_condition(expected_version):
    if expected_version is None:
        return Attr(KEY).not_exists()
    if expected_version == 0:
        # documents written before versioning carry no counter
        return Attr(KEY).exists() & Attr('version').not_exists()
    return Attr('version').eq(expected_version)


@contextmanager
def _store_call(action):
    try:
        yield
    except ClientError as e:
        if _conditional_failure(e):
            raise
        logger.error("DynamoDB %s failed: %s", action, e)
        raise StoreError(f"{action} failed") from e
    except BotoCoreError as e:
        logger.error("DynamoDB %s failed: %s", action, e)
        raise StoreError(f"{action} failed") from e


class GameStore:
    def __init__(self, table):
        self.table = table

    @classmethod
    def from_config(cls, table_name=None, region=None):
        table_name = table_name or config.GAMES_TABLE
        if not table_name:
            raise ConfigurationError("GAMES_TABLE is required")
        resource = boto3.resource('dynamodb', region_name=region or config.DYNAMODB_REGION)
        return cls(resource.Table(table_name))

    def close(self):
        self.table.meta.client.close()

    def find_one(self, game_id):
        with _store_call('get_item'):
            item = self.table.get_item(Key={KEY: game_id}).get('Item')
        return _coerce(item) if item else None

    def _scan(self, **kwargs):
        items = []
        while True:
            with _store_call('scan'):
                resp = self.table.scan(**kwargs)
            items.extend(resp.get('Items', []))
            last = resp.get('LastEvaluatedKey')
            if not last:
                return [_coerce(it) for it in items]
            kwargs['ExclusiveStartKey'] = last

    def find_all(self):
        return self._scan()

    def find_by_title(self, title):
        matches = self._scan(FilterExpression=Attr('title').eq(title))
        return matches[0] if matches else None

    def all_pins(self):
        items = self._scan(ProjectionExpression='gamePin')
        return {it['gamePin'] for it in items if isinstance(it.get('gamePin'), str)}

    def insert_one(self, doc):
        item = dict(doc, version=1)
        try:
            with _store_call('put_item'):
                self.table.put_item(Item=_to_item(item), ConditionExpression=Attr(KEY).not_exists())
        except ClientError:
            raise ValidationError("Game with this ID already exists")
        return item

    def set_pin(self, game_id, pin, now):
        """Upsert ``gamePin`` onto a game; returns False if it already had one."""
        try:
            with _store_call('update_item'):
                self.table.update_item(
                    Key={KEY: game_id},
                    UpdateExpression='SET gamePin = :pin, updatedAt = :now',
                    ConditionExpression=Attr('gamePin').not_exists(),
                    ExpressionAttributeValues={':pin': pin, ':now': now},
                )
        except ClientError:
            return False
        return True

    def save(self, doc, expected_version):
        """Write a whole game document.

        ``expected_version`` is the version read before the change, or None
        when the game did not exist yet.
        """
        item = dict(doc, version=(expected_version or 0) + 1)
        try:
            with _store_call('put_item'):
                self.table.put_item(
                    Item=_to_item(item),
                    ConditionExpression=_version_condition(expected_version),
                )
        except ClientError:
            raise ConcurrentModification(f"Game {doc[KEY]} was modified concurrently, retry the request")
        return item

    def update_fields(self, game_id, fields, expected_version):
        names = {}
        values = {':next': (expected_version or 0) + 1}
        parts = ['#version = :next']
        names['#version'] = 'version'
        for i, (name, value) in enumerate(fields.items()):
            names[f'#f{i}'] = name
            values[f':v{i}'] = value
            parts.append(f'#f{i} = :v{i}')
        try:
            with _store_call('update_item'):
                resp = self.table.update_item(
                    Key={KEY: game_id},
                    UpdateExpression='SET ' + ', '.join(parts),
                    ConditionExpression=_version_condition(expected_version),
                    ExpressionAttributeNames=names,
                    ExpressionAttributeValues=_to_item(values),
                    ReturnValues='ALL_NEW',
                )
        except ClientError:
            raise ConcurrentModification(f"Game {game_id} was modified concurrently, retry the request")
        return _coerce(resp.get('Attributes', {}))


@contextmanager
def acquire_store(store=None):
    """Yield ``store`` if given, else a store built from config that is closed afterwards."""
    if store is not None:
        yield store
        return
    owned = GameStore.from_config()
    try:
        yield owned
    finally:
        owned.close()
