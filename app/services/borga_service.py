"""Business logic for BORGA: authentication, argument checks, delegation."""
import logging
import secrets
from typing import Any, Dict, List, Optional

from ..errors import BadRequest, MissingParam, Unauthenticated
from ..repositories.base import BaseStore
from ..schemas import ORDER_BY_FIELDS

MAX_SEARCH_LIMIT = 100


class BorgaService:
    """The only entry point transport adapters may call.

    Group and game mutations take ``(token, user_id, ...)``: the token must
    resolve to *user_id* or :class:`~app.errors.Unauthenticated` is raised
    before the store is consulted about the target user or group.  Game
    search, game details and popular games need no token; neither does user
    creation.

    Args:
        store:   Any :class:`~app.repositories.base.BaseStore`.
        catalog: Board-game catalog client exposing ``search_games`` and
                 ``get_game_details`` (see ``catalog_client.py``).
    """

    def __init__(self, store: BaseStore, catalog) -> None:
        self._store = store
        self._catalog = catalog
        self._log = logging.getLogger('borga.service')

    @property
    def store(self) -> BaseStore:
        return self._store

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _authenticate(self, token: Optional[str], user_id: str) -> None:
        owner = self._store.token_to_user_id(token) if token else None
        if owner is None:
            self._log.info("Rejected request with unknown token")
            raise Unauthenticated({'token': token})
        if owner != user_id:
            self._log.info("Token of %s used against user %s", owner, user_id)
            raise Unauthenticated({'userId': user_id})

    @staticmethod
    def _require_strings(**values) -> None:
        """Raise one BadRequest listing every argument that is not a non-empty str."""
        info = {}
        for name, value in values.items():
            if value is None or value == '':
                info[name] = 'required property missing'
            elif not isinstance(value, str):
                info[name] = f'wrong type. expected string. instead got {type(value).__name__}'
        if info:
            raise BadRequest(info)

    @staticmethod
    def _require_params(**values) -> None:
        """Raise MissingParam naming every path parameter left empty."""
        info = {name: 'required parameter missing'
                for name, value in values.items() if value is None or value == ''}
        if info:
            raise MissingParam(info)

    @staticmethod
    def _optional_strings(**values) -> None:
        info = {name: f'wrong type. expected string. instead got {type(value).__name__}'
                for name, value in values.items()
                if value is not None and not isinstance(value, str)}
        if info:
            raise BadRequest(info)

    def _new_group_id(self, user_id: str) -> str:
        existing = self._store.list_groups(user_id)
        group_id = secrets.token_urlsafe(6)
        while group_id in existing:
            group_id = secrets.token_urlsafe(6)
        return group_id

    # ------------------------------------------------------------------
    # Games (no token required)
    # ------------------------------------------------------------------

    def get_popular_games(self) -> List[Dict[str, Any]]:
        return self._store.get_popular_games()

    def search_games_by_name(self, game_name: str, limit=None, order_by: Optional[str] = None,
                             ascending=None) -> List[Dict[str, Any]]:
        """Search the catalog by name.

        Args:
            game_name: Text to search for (required).
            limit:     1..100, as an int or a numeric string.
            order_by:  One of :data:`~app.schemas.ORDER_BY_FIELDS`.
            ascending: ``True``/``False`` or the strings ``"true"``/``"false"``.

        Raises:
            BadRequest: with every invalid argument listed.
            ExternalServiceFailure: if the catalog cannot be reached.
        """
        info = {}
        if game_name is None or game_name == '':
            info['gameName'] = 'required parameter missing'
        elif not isinstance(game_name, str):
            info['gameName'] = 'wrong type. expected string'

        if limit is not None:
            try:
                limit = int(limit)
            except (TypeError, ValueError):
                limit = None
                info['limit'] = f'must be an integer between 1 and {MAX_SEARCH_LIMIT}'
            else:
                if not 1 <= limit <= MAX_SEARCH_LIMIT:
                    info['limit'] = f'must be an integer between 1 and {MAX_SEARCH_LIMIT}'

        if order_by is not None and order_by not in ORDER_BY_FIELDS:
            info['order_by'] = 'must be one of ' + ', '.join(ORDER_BY_FIELDS)

        if isinstance(ascending, str):
            lowered = ascending.lower()
            if lowered in ('true', 'false'):
                ascending = lowered == 'true'
            else:
                info['ascending'] = 'must be true or false'
        elif ascending is not None and not isinstance(ascending, bool):
            info['ascending'] = 'must be true or false'

        if info:
            raise BadRequest(info)

        return self._catalog.search_games(game_name, limit=limit, order_by=order_by,
                                          ascending=ascending)

    def get_game_details(self, game_id: str) -> Dict[str, Any]:
        self._require_params(gameId=game_id)
        self._require_strings(gameId=game_id)
        return self._catalog.get_game_details(game_id)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_new_user(self, user_id: str, user_name: str) -> Dict[str, str]:
        self._require_strings(userId=user_id, userName=user_name)
        return self._store.create_user(user_id, user_name)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def create_group(self, token: Optional[str], user_id: str, group_name: str,
                     group_description: str, group_id: Optional[str] = None) -> Dict[str, str]:
        """Create a group owned by *user_id*.

        A random url-safe id is generated when *group_id* is omitted.
        """
        self._authenticate(token, user_id)
        self._require_strings(groupName=group_name, groupDescription=group_description)
        self._optional_strings(groupId=group_id)
        if not group_id:
            group_id = self._new_group_id(user_id)
        return self._store.create_group(user_id, group_id, group_name, group_description)

    def edit_group(self, token: Optional[str], user_id: str, group_id: str,
                   new_group_name: Optional[str] = None,
                   new_group_description: Optional[str] = None) -> Dict[str, str]:
        self._authenticate(token, user_id)
        self._require_params(groupId=group_id)
        self._require_strings(groupId=group_id)
        self._optional_strings(newGroupName=new_group_name,
                               newGroupDescription=new_group_description)
        # An empty field leaves the stored value unchanged
        new_group_name = new_group_name or None
        new_group_description = new_group_description or None
        return self._store.edit_group(user_id, group_id, new_group_name, new_group_description)

    def list_user_groups(self, token: Optional[str], user_id: str) -> Dict[str, Dict[str, Any]]:
        self._authenticate(token, user_id)
        return self._store.list_groups(user_id)

    def delete_group(self, token: Optional[str], user_id: str, group_id: str) -> Dict[str, str]:
        self._authenticate(token, user_id)
        self._require_params(groupId=group_id)
        self._require_strings(groupId=group_id)
        return self._store.delete_group(user_id, group_id)

    def get_group_details(self, token: Optional[str], user_id: str,
                          group_id: str) -> Dict[str, Any]:
        self._authenticate(token, user_id)
        self._require_params(groupId=group_id)
        self._require_strings(groupId=group_id)
        return self._store.get_group(user_id, group_id)

    # ------------------------------------------------------------------
    # Group games
    # ------------------------------------------------------------------

    def add_game_to_group(self, token: Optional[str], user_id: str, group_id: str,
                          game_id: str) -> Dict[str, Any]:
        """Fetch *game_id* from the catalog and reference it from the group.

        The group is resolved before the catalog is queried.
        """
        self._authenticate(token, user_id)
        self._require_params(groupId=group_id)
        self._require_strings(groupId=group_id, gameId=game_id)
        self._store.get_group(user_id, group_id)
        game = self._catalog.get_game_details(game_id)
        return self._store.add_game_to_group(user_id, group_id, game)

    def remove_game_from_group(self, token: Optional[str], user_id: str, group_id: str,
                               game_id: str) -> Dict[str, Any]:
        self._authenticate(token, user_id)
        self._require_params(groupId=group_id, gameId=game_id)
        self._require_strings(groupId=group_id, gameId=game_id)
        return self._store.remove_game_from_group(user_id, group_id, game_id)
