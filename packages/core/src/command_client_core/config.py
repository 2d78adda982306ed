"""ConfigCollection — nested configuration store with path access."""

from __future__ import annotations

from typing import Any

PATH_DELIMITER = "/"


class ConfigCollection:
    """Nested ``dict`` wrapper addressed by ``"a/b/c"`` style paths."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = _copy_dicts(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def get_path(self, path: str, default: Any = None) -> Any:
        """Return the value at *path*, or *default* if any segment is missing."""
        current: Any = self._data
        for segment in path.split(PATH_DELIMITER):
            if not isinstance(current, dict) or segment not in current:
                return default
            current = current[segment]
        return current

    def set_path(self, path: str, value: Any) -> None:
        """Set *value* at *path*, creating intermediate dicts as needed.

        A non-dict value found along the path is replaced by a dict.
        """
        *parents, leaf = path.split(PATH_DELIMITER)
        current = self._data
        for segment in parents:
            child = current.get(segment)
            if not isinstance(child, dict):
                child = {}
                current[segment] = child
            current = child
        current[leaf] = value

    def to_dict(self) -> dict[str, Any]:
        """Return a copy of the stored configuration; nested dicts are copied."""
        return _copy_dicts(self._data)


def _copy_dicts(data: dict[str, Any]) -> dict[str, Any]:
    return {
        key: _copy_dicts(value) if isinstance(value, dict) else value
        for key, value in data.items()
    }
