import os


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-in-production'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    # Append-only JSONL file, one line per finished match
    MATCH_LOG_PATH = os.environ.get('MATCH_LOG_PATH', 'database.json')
    # Secret length used when a create request has no usable value
    DEFAULT_DIGITS = int(os.environ.get('DEFAULT_DIGITS', '5'))
    MIN_DIGITS = int(os.environ.get('MIN_DIGITS', '1'))
    MAX_DIGITS = int(os.environ.get('MAX_DIGITS', '10'))
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '30'))
    MAX_TEXT_LENGTH = int(os.environ.get('MAX_TEXT_LENGTH', '300'))
