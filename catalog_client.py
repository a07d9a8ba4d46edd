"""
catalog_client.py
=================
Board Game Atlas API client used by :class:`app.services.BorgaService`.

Two calls are needed:

* ``search_games(name, ...)``  → ``GET /search?name=...``
* ``get_game_details(game_id)`` → ``GET /search?ids=...``

Raw catalog entries are normalised to BORGA game records::

    {"id", "name", "url", "image", "publisher", "amazon_rank", "price"}

Configuration keys (``config.json``)
-------------------------------------
::

    "atlas_client_id": "YOUR_ATLAS_CLIENT_ID",
    "request_timeout": 10
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from app.errors import ExternalServiceFailure, NotFound

logger = logging.getLogger('borga.catalog')

SERVICE_NAME = 'boardgameatlas'


def normalise_game(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Map a raw Board Game Atlas entry onto a BORGA game record."""
    publisher = raw.get('primary_publisher') or raw.get('publisher')
    if isinstance(publisher, dict):
        publisher = publisher.get('name')

    price = raw.get('price')
    try:
        price = float(price) if price not in (None, '') else None
    except (TypeError, ValueError):
        price = None

    return {
        'id': raw.get('id'),
        'name': raw.get('name'),
        'url': raw.get('url'),
        'image': raw.get('image_url') or raw.get('image'),
        'publisher': publisher,
        'amazon_rank': raw.get('amazon_rank', raw.get('rank')),
        'price': price,
    }


class BoardGameAtlasClient:
    """Client for the Board Game Atlas search API.

    Args:
        client_id: Board Game Atlas application client id.
        timeout:   HTTP request timeout in seconds.
    """

    BASE_URL = "https://api.boardgameatlas.com/api"

    def __init__(self, client_id: str, timeout: int = 10) -> None:
        self._client_id = client_id
        self._timeout = timeout
        self._session = requests.Session()
        # In-process details cache keyed by game id
        self.details_cache: Dict[str, Dict[str, Any]] = {}

    def _search(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        query = dict(params, client_id=self._client_id)
        try:
            resp = self._session.get(f"{self.BASE_URL}/search", params=query,
                                     timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            logger.error("Board Game Atlas request failed: %s", exc)
            raise ExternalServiceFailure({'service': SERVICE_NAME, 'reason': str(exc)}) from exc
        except ValueError as exc:
            logger.error("Board Game Atlas returned invalid JSON: %s", exc)
            raise ExternalServiceFailure({'service': SERVICE_NAME,
                                          'reason': 'invalid JSON response'}) from exc

        if not isinstance(data, dict) or not isinstance(data.get('games'), list):
            raise ExternalServiceFailure({'service': SERVICE_NAME,
                                          'reason': 'unexpected response shape'})
        return data['games']

    def search_games(self, name: str, limit: Optional[int] = None,
                     order_by: Optional[str] = None,
                     ascending: Optional[bool] = None) -> List[Dict[str, Any]]:
        """Return the catalog games matching *name*, normalised.

        Raises:
            ExternalServiceFailure: on network, HTTP or payload errors.
        """
        params: Dict[str, Any] = {'name': name}
        if limit is not None:
            params['limit'] = limit
        if order_by is not None:
            params['order_by'] = order_by
        if ascending is not None:
            params['ascending'] = 'true' if ascending else 'false'

        games = [normalise_game(g) for g in self._search(params)]
        logger.debug("Search %r returned %d games", name, len(games))
        return games

    def get_game_details(self, game_id: str) -> Dict[str, Any]:
        """Return the record of *game_id*.

        Raises:
            NotFound: if the catalog has no game with that id.
            ExternalServiceFailure: on network, HTTP or payload errors.
        """
        if game_id in self.details_cache:
            return self.details_cache[game_id]

        matches = [g for g in self._search({'ids': game_id}) if g.get('id') == game_id]
        if not matches:
            raise NotFound({'gameId': game_id})

        game = normalise_game(matches[0])
        self.details_cache[game_id] = game
        return game
