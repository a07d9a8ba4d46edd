#!/usr/bin/env python3
"""
BORGA - Board Games Application
Launches the BORGA REST API: search the Board Game Atlas catalog, see the most
popular games and manage groups of favourite games.
"""

import argparse
import json
import logging
import os
import sys
from typing import Dict, Optional

from colorama import Fore, init
from dotenv import load_dotenv

from app.errors import NotFound
from app.repositories import BaseStore, FileStore, MemoryStore
from app.services import BorgaService
from catalog_client import BoardGameAtlasClient

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def setup_logging(level: str = 'WARNING') -> logging.Logger:
    """Configure the root BORGA logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, level.upper(), logging.WARNING)
    logger = logging.getLogger('borga')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


logger = setup_logging()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_CONFIG: Dict = {
    'atlas_client_id': '',
    'host': '127.0.0.1',
    'port': 8888,
    'log_level': 'INFO',
    'store': 'memory',
    'data_file': '.borga_data.json',
    'seed_demo_users': True,
    'request_timeout': 10,
}

# (config key, environment variable, converter)
_ENV_OVERRIDES = (
    ('atlas_client_id', 'BORGA_ATLAS_CLIENT_ID', str),
    ('host', 'BORGA_HOST', str),
    ('port', 'BORGA_PORT', int),
    ('log_level', 'BORGA_LOG_LEVEL', str),
    ('store', 'BORGA_STORE', str),
    ('data_file', 'BORGA_DATA_FILE', str),
)

STORE_CHOICES = ('memory', 'file')

# The three accounts every fresh BORGA instance starts with: (user_id, name, token)
DEMO_USERS = (
    ('A48280', 'André Jesus', '4869fdf7-0e62-46a2-872c-f0dc60fc2c81'),
    ('A48287', 'Nyckollas Brandão', '3e39bce8-07d1-4c05-9ee3-5587e6b8e2e7'),
    ('A48309', 'André Santos', '5d389af1-06db-4401-8aef-36d8d6428f31'),
)


def is_placeholder_value(value: str) -> bool:
    """Check if a value is a placeholder that should not be used for real API calls."""
    if not value or not isinstance(value, str):
        return True
    return value.startswith('YOUR_')


def load_config(config_path: str = 'config.json') -> Dict:
    """Load configuration from a JSON file with environment variable support.

    Missing keys fall back to :data:`DEFAULT_CONFIG`; a missing file yields the
    defaults.  Environment variables take precedence over file values:

    - BORGA_ATLAS_CLIENT_ID overrides atlas_client_id
    - BORGA_HOST / BORGA_PORT override host / port
    - BORGA_LOG_LEVEL overrides log_level
    - BORGA_STORE / BORGA_DATA_FILE override store / data_file

    Raises:
        ValueError: if the file is not valid JSON, or a value is invalid.
    """
    config = dict(DEFAULT_CONFIG)

    if os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config.update(json.load(f))
        except json.JSONDecodeError as e:
            raise ValueError(f"Config file '{config_path}' is not valid JSON: {e}") from e
    else:
        logger.warning("Config file '%s' not found, using defaults", config_path)

    for key, env_var, convert in _ENV_OVERRIDES:
        value = os.getenv(env_var)
        if value:
            try:
                config[key] = convert(value)
            except ValueError as e:
                raise ValueError(f"Invalid value for {env_var}: {value!r}") from e

    if config['store'] not in STORE_CHOICES:
        raise ValueError(f"Unknown store '{config['store']}', expected one of {STORE_CHOICES}")

    return config


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def _user_exists(store: BaseStore, user_id: str) -> bool:
    try:
        store.get_user(user_id)
    except NotFound:
        return False
    return True


def build_store(config: Dict) -> BaseStore:
    """Create the store selected by ``config['store']``, seeding demo users if asked."""
    if config['store'] == 'file':
        store: BaseStore = FileStore(config['data_file'])
    else:
        store = MemoryStore()

    if config.get('seed_demo_users'):
        missing = [u for u in DEMO_USERS if not _user_exists(store, u[0])]
        if missing:
            store.seed_users(missing)
            logger.info("Seeded %d demo users", len(missing))
    return store


def build_service(config: Dict, store: Optional[BaseStore] = None) -> BorgaService:
    catalog = BoardGameAtlasClient(config['atlas_client_id'],
                                   timeout=config.get('request_timeout', 10))
    return BorgaService(store if store is not None else build_store(config), catalog)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='BORGA - Board Games Application REST API'
    )
    parser.add_argument('-c', '--config', default='config.json',
                        help='Path to config file (default: config.json)')
    parser.add_argument('--host', help='Interface to bind')
    parser.add_argument('--port', type=int, help='Port to listen on')
    parser.add_argument('-s', '--store', choices=STORE_CHOICES, help='Storage backend')
    parser.add_argument('-f', '--data-file', help='JSON file used by the file store')
    parser.add_argument('--debug', action='store_true', help='Run with debug logging')
    args = parser.parse_args(argv)

    # BORGA_* variables may also come from a .env file
    load_dotenv()

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"{Fore.RED}Error: {e}")
        return 1

    for key in ('host', 'port', 'store', 'data_file'):
        value = getattr(args, key)
        if value is not None:
            config[key] = value

    setup_logging('DEBUG' if args.debug else config['log_level'])

    if is_placeholder_value(config['atlas_client_id']):
        print(f"{Fore.YELLOW}Warning: no Board Game Atlas client id configured; "
              f"game search will fail with EXT_SVC_FAIL.")
        print(f"{Fore.YELLOW}Set atlas_client_id in {args.config} or BORGA_ATLAS_CLIENT_ID.")

    from borga_web import create_app
    app = create_app(build_service(config))
    print(f"{Fore.GREEN}BORGA listening on http://{config['host']}:{config['port']}/api/docs")
    # Store operations must not interleave
    app.run(host=config['host'], port=config['port'], debug=args.debug, threaded=False)
    return 0


if __name__ == '__main__':
    sys.exit(main())
