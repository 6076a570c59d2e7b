"""JSON file-backed preferences store."""

import json
from dataclasses import dataclass
from pathlib import Path

from nutrichat.services.preferences import LocalStore


@dataclass
class JsonFileLocalStore(LocalStore):
    """Stores preference strings in a single JSON object on disk."""

    path: Path

    @classmethod
    def create(cls, path: str) -> "JsonFileLocalStore":
        """Create a store, making the parent directory if needed."""
        resolved = Path(path)
        resolved.parent.mkdir(parents=True, exist_ok=True)
        return cls(path=resolved)

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value and rewrite the file."""
        values = self._read()
        values[key] = value
        self._write(values)

    def remove(self, key: str) -> None:
        """Remove a key if present."""
        values = self._read()
        if values.pop(key, None) is not None:
            self._write(values)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, values: dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(values, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
