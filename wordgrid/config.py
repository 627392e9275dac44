import os

def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')

class Config:
    # Turn countdown; the remaining whole seconds become the time bonus
    TURN_SECONDS = int(os.environ.get('WORDGRID_TURN_SECONDS', '20'))
    # How often a disconnected session retries (seconds)
    RECONNECT_INTERVAL_SEC = float(os.environ.get('WORDGRID_RECONNECT_INTERVAL_SEC', '5'))
    MAX_PLAYERS = int(os.environ.get('WORDGRID_MAX_PLAYERS', '4'))
    RACK_SIZE = int(os.environ.get('WORDGRID_RACK_SIZE', '7'))
    # Chance that one freshly drawn tile is swapped for a blank
    INITIAL_BLANK_CHANCE = float(os.environ.get('WORDGRID_INITIAL_BLANK_CHANCE', '0.25'))
    RESTOCK_BLANK_CHANCE = float(os.environ.get('WORDGRID_RESTOCK_BLANK_CHANCE', '0.10'))
    # Full word list; empty keeps the built-in common words only
    DICTIONARY_URL = os.environ.get(
        'WORDGRID_DICTIONARY_URL',
        'https://raw.githubusercontent.com/redbo/scrabble/master/dictionary.txt',
    )
    DICTIONARY_TIMEOUT_SEC = float(os.environ.get('WORDGRID_DICTIONARY_TIMEOUT_SEC', '10'))
    SERVER_URL = os.environ.get('WORDGRID_SERVER_URL', 'http://localhost:8000')
    STORE_CALL_TIMEOUT_SEC = float(os.environ.get('WORDGRID_STORE_CALL_TIMEOUT_SEC', '10'))
    # False discards pending tiles when the submit writes fail
    RESTORE_TILES_ON_SUBMIT_FAILURE = _flag('WORDGRID_RESTORE_TILES_ON_SUBMIT_FAILURE', '1')
    LOG_LEVEL = os.environ.get('WORDGRID_LOG_LEVEL', 'INFO')
    # Bind address for the store server
    HOST = os.environ.get('WORDGRID_HOST', '0.0.0.0')
    PORT = int(os.environ.get('WORDGRID_PORT', '8000'))
