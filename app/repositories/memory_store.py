"""In-memory implementation of :class:`~app.repositories.base.BaseStore`."""
import logging
import uuid
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from ..errors import AlreadyExists, NotFound
from .base import POPULAR_GAMES_LIMIT, BaseStore, SeedUser


def new_user(name: str) -> Dict[str, Any]:
    return {'name': name, 'groups': {}}


def new_group(name: str, description: str) -> Dict[str, Any]:
    return {'name': name, 'description': description, 'games': {}}


def group_summary(group_id: str, group: Dict[str, Any]) -> Dict[str, str]:
    return {
        'groupId': group_id,
        'name': group['name'],
        'description': group['description'],
    }


class MemoryStore(BaseStore):
    """Keeps users, the shared game catalog and tokens in plain dicts.

    Every operation runs to completion without suspending, so a single
    process never observes a half-applied mutation.
    """

    def __init__(self) -> None:
        self._log = logging.getLogger('borga.store')
        self.users: Dict[str, Dict[str, Any]] = {}
        self.games: Dict[str, Dict[str, Any]] = {}
        self.tokens: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, user_id: str, name: str) -> Dict[str, str]:
        if user_id in self.users:
            raise AlreadyExists({'userId': user_id})

        token = str(uuid.uuid4())
        self.users[user_id] = new_user(name)
        self.tokens[token] = user_id
        self._log.info("Created user %s", user_id)
        self._changed()
        return {'userId': user_id, 'token': token, 'name': name}

    def get_user(self, user_id: str) -> Dict[str, Any]:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound({'userId': user_id})
        return user

    def token_to_user_id(self, token: Optional[str]) -> Optional[str]:
        if token is None:
            return None
        return self.tokens.get(token)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def create_group(self, user_id: str, group_id: str, name: str,
                     description: str) -> Dict[str, str]:
        user = self.get_user(user_id)
        if group_id in user['groups']:
            raise AlreadyExists({'groupId': group_id})

        group = new_group(name, description)
        user['groups'][group_id] = group
        self._log.info("Created group %s for user %s", group_id, user_id)
        self._changed()
        return group_summary(group_id, group)

    def get_group(self, user_id: str, group_id: str) -> Dict[str, Any]:
        group = self.get_user(user_id)['groups'].get(group_id)
        if group is None:
            raise NotFound({'groupId': group_id})
        return group

    def edit_group(self, user_id: str, group_id: str,
                   new_name: Optional[str] = None,
                   new_description: Optional[str] = None) -> Dict[str, str]:
        group = self.get_group(user_id, group_id)
        if new_name is not None:
            group['name'] = new_name
        if new_description is not None:
            group['description'] = new_description
        self._changed()
        return group_summary(group_id, group)

    def list_groups(self, user_id: str) -> Dict[str, Dict[str, Any]]:
        return self.get_user(user_id)['groups']

    def delete_group(self, user_id: str, group_id: str) -> Dict[str, str]:
        group = self.get_group(user_id, group_id)
        del self.users[user_id]['groups'][group_id]
        self._log.info("Deleted group %s of user %s", group_id, user_id)
        self._changed()
        return group_summary(group_id, group)

    # ------------------------------------------------------------------
    # Games
    # ------------------------------------------------------------------

    def add_game_to_group(self, user_id: str, group_id: str,
                          game: Dict[str, Any]) -> Dict[str, Any]:
        group = self.get_group(user_id, group_id)
        game_id = game['id']
        self.games[game_id] = game
        group['games'][game_id] = game['name']
        self._log.debug("Added game %s to %s/%s", game_id, user_id, group_id)
        self._changed()
        return game

    def get_game_from_group(self, user_id: str, group_id: str,
                            game_id: str) -> Dict[str, Any]:
        group = self.get_group(user_id, group_id)
        game = self.games.get(game_id)
        if game_id not in group['games'] or game is None:
            raise NotFound({'gameId': game_id})
        return game

    def remove_game_from_group(self, user_id: str, group_id: str,
                               game_id: str) -> Dict[str, Any]:
        game = self.get_game_from_group(user_id, group_id, game_id)
        del self.get_group(user_id, group_id)['games'][game_id]
        self._log.debug("Removed game %s from %s/%s", game_id, user_id, group_id)
        self._changed()
        return game

    def get_popular_games(self) -> List[Dict[str, Any]]:
        occurrences: Counter = Counter()
        for user in self.users.values():
            for group in user['groups'].values():
                occurrences.update(group['games'].keys())

        # most_common keeps first-seen order among equal counts
        return [
            {'game': self.games[game_id], 'count': count}
            for game_id, count in occurrences.most_common(POPULAR_GAMES_LIMIT)
        ]

    # ------------------------------------------------------------------
    # Admin / test helpers
    # ------------------------------------------------------------------

    def seed_users(self, entries: Iterable[SeedUser]) -> None:
        entries = list(entries)
        for user_id, _, _ in entries:
            if user_id in self.users:
                raise AlreadyExists({'userId': user_id})

        for user_id, name, token in entries:
            self.users[user_id] = new_user(name)
            self.tokens[token] = user_id
        self._changed()

    def reset_all(self) -> None:
        self.users = {}
        self.games = {}
        self.tokens = {}
        self._log.warning("All store state cleared")
        self._changed()

    def reset_all_groups(self) -> None:
        for user in self.users.values():
            user['groups'] = {}
        self._changed()

    def _changed(self) -> None:
        """Hook called after every mutation.  Persistent subclasses save here."""
