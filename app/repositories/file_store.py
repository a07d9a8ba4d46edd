"""JSON-file backed store, a drop-in substitute for :class:`MemoryStore`."""
import json
import os
import tempfile
from typing import Any, Dict

from .memory_store import MemoryStore


class FileStore(MemoryStore):
    """Persists the users, games and tokens collections to one JSON file.

    Schema::

        {"users": {...}, "games": {...}, "tokens": {...}}

    State is loaded once on construction and written back after every
    mutation.  The atomic write uses a write-then-rename strategy so the file
    is never left in a partially-written state.
    """

    def __init__(self, file_path: str = '.borga_data.json') -> None:
        super().__init__()
        self._path = file_path
        data = self._load({})
        self.users = data.get('users', {})
        self.games = data.get('games', {})
        self.tokens = data.get('tokens', {})

    @property
    def path(self) -> str:
        return self._path

    def _load(self, default: Any) -> Any:
        """Load JSON from *self._path*, returning *default* on missing/corrupt file."""
        if os.path.exists(self._path):
            try:
                with open(self._path, 'r', encoding='utf-8') as fh:
                    data = json.load(fh)
                if isinstance(data, dict):
                    return data
                self._log.warning("Ignoring %s: top-level value is not an object", self._path)
            except (json.JSONDecodeError, IOError) as exc:
                self._log.warning("Could not load %s: %s", self._path, exc)
        return default

    def _snapshot(self) -> Dict[str, Any]:
        return {'users': self.users, 'games': self.games, 'tokens': self.tokens}

    def _changed(self) -> None:
        self._save(self._snapshot())

    def _save(self, data: Dict[str, Any]) -> None:
        """Write *data* to a temp file beside *self._path*, then rename it into place."""
        dir_name = os.path.dirname(os.path.abspath(self._path))
        fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
