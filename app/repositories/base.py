"""Storage interface implemented by every BORGA store."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

POPULAR_GAMES_LIMIT = 20

# (user_id, name, token)
SeedUser = Tuple[str, str, str]


class BaseStore(ABC):
    """Owns the three logical collections of BORGA state.

    Layout::

        users:  {user_id: {"name": str, "groups": {group_id: group}}}
        group:  {"name": str, "description": str, "games": {game_id: game_name}}
        games:  {game_id: game_record}
        tokens: {token: user_id}

    No authorisation happens here; that is the service layer's job.  Every
    "resolve by id" operation raises :class:`~app.errors.NotFound` and every
    "create new id" operation raises :class:`~app.errors.AlreadyExists`.
    """

    # -- users --------------------------------------------------------------

    @abstractmethod
    def create_user(self, user_id: str, name: str) -> Dict[str, str]:
        """Create a user and issue its token.  Returns ``{userId, token, name}``."""

    @abstractmethod
    def get_user(self, user_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    def token_to_user_id(self, token: Optional[str]) -> Optional[str]:
        """Return the user id owning *token*, or ``None`` if it is unknown."""

    # -- groups -------------------------------------------------------------

    @abstractmethod
    def create_group(self, user_id: str, group_id: str, name: str,
                     description: str) -> Dict[str, str]:
        pass

    @abstractmethod
    def get_group(self, user_id: str, group_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    def edit_group(self, user_id: str, group_id: str,
                   new_name: Optional[str] = None,
                   new_description: Optional[str] = None) -> Dict[str, str]:
        """Update name and/or description; ``None`` keeps the prior value."""

    @abstractmethod
    def list_groups(self, user_id: str) -> Dict[str, Dict[str, Any]]:
        pass

    @abstractmethod
    def delete_group(self, user_id: str, group_id: str) -> Dict[str, str]:
        """Remove a group and return its pre-deletion summary."""

    # -- games --------------------------------------------------------------

    @abstractmethod
    def add_game_to_group(self, user_id: str, group_id: str,
                          game: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def get_game_from_group(self, user_id: str, group_id: str,
                            game_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    def remove_game_from_group(self, user_id: str, group_id: str,
                               game_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    def get_popular_games(self) -> List[Dict[str, Any]]:
        """Return up to :data:`POPULAR_GAMES_LIMIT` ``{game, count}`` entries,
        most referenced first."""

    # -- admin / test helpers ----------------------------------------------

    @abstractmethod
    def seed_users(self, entries: Iterable[SeedUser]) -> None:
        pass

    @abstractmethod
    def reset_all(self) -> None:
        pass

    @abstractmethod
    def reset_all_groups(self) -> None:
        pass
