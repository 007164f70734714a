import os

GAMES_TABLE = os.environ.get('GAMES_TABLE')
DYNAMODB_REGION = os.environ.get('DYNAMODB_REGION') or os.environ.get('AWS_REGION')
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

# upper bound on pin draws before giving up
PIN_MAX_ATTEMPTS = int(os.environ.get('PIN_MAX_ATTEMPTS', '1000'))
PIN_MIN = 100000
PIN_MAX = 999999
