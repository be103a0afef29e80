"""Storage of saved graph definitions as JSON text files in one directory."""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path

_START_KEY = b'"start"'


def _hash_name(name: str) -> str:
    return hashlib.sha1(name.encode("utf-8")).hexdigest()[:16]


class GraphStore:
    """Saves, lists and deletes graph definitions kept under ``root``."""

    def __init__(self, root: str | os.PathLike):
        self.root = Path(root)

    def _ensure_dir(self) -> None:
        if self.root.exists() and not self.root.is_dir():
            self.root.unlink()
        self.root.mkdir(parents=True, exist_ok=True)

    def _files(self) -> list[Path]:
        if not self.root.is_dir():
            return []
        return sorted(path for path in self.root.iterdir() if path.is_file())

    def create(self, data: str) -> str:
        """Save a graph definition and return the id derived from its name.

        The file is stored as ``<id>.txt``; an existing graph of the same
        name is replaced.
        """
        self._ensure_dir()
        try:
            graph = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ValueError(f"graph definition is not valid JSON: {exc}") from exc
        if not isinstance(graph, dict) or not isinstance(graph.get("name"), str):
            raise ValueError("graph definition must be an object with a name")
        graph_id = _hash_name(graph["name"])
        path = self.root / f"{graph_id}.txt"
        path.unlink(missing_ok=True)
        path.write_text(data, encoding="utf-8")
        return graph_id

    def delete(self, graph_id: str) -> None:
        """Remove the graph file named ``graph_id`` if it exists."""
        (self.root / graph_id).unlink(missing_ok=True)

    def get_all(self) -> str:
        """Return a JSON array of the graphs that carry a "start" entry.

        Each element is the stored object with an "id" member naming its file.
        """
        entries = []
        for path in self._files():
            raw = path.read_bytes()
            if len(raw) < 10 or _START_KEY not in raw[: len(raw) - 3]:
                continue
            body = raw[:-1].decode("utf-8", errors="replace")
            entries.append(f'{body},"id":"{path.name}"}}')
        return "[" + ",".join(entries) + "]"

    def get_all_plus(self) -> str:
        """Return a JSON array of name and id for graphs without a "start" entry."""
        entries = []
        for path in self._files():
            try:
                graph = json.loads(path.read_bytes().decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError):
                continue
            if not isinstance(graph, dict) or "start" in graph:
                continue
            name = graph.get("name")
            entry = {"name": name if isinstance(name, str) else "", "id": path.name}
            entries.append(json.dumps(entry, separators=(",", ":")))
        return "[" + ",".join(entries) + "]"