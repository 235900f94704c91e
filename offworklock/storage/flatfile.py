"""Line-oriented flat file backend.

Each context is stored in ``<directory>/<context>.dat``::

    # Player state for context survival
    3f0c1d2e-...,120,true,false,2

Fields are player id, points, unlocked, session open, forced exit count. The
last two fields are optional so files written by older versions still load.
Malformed lines are skipped one by one.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Iterator, Mapping

from ..domain.exceptions import StorageError
from .base import PlayerRecord, RecordBackend

logger = logging.getLogger(__name__)

FILE_SUFFIX = ".dat"


class FlatFileRecordBackend(RecordBackend):
    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create storage directory {self._directory}") from exc

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, context: str) -> Path:
        return self._directory / f"{context}{FILE_SUFFIX}"

    async def load(self, context: str) -> dict[str, PlayerRecord]:
        path = self.path_for(context)
        if not path.exists():
            return {}
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Cannot read {path}", context=context) from exc
        return parse_records(_decode_lines(raw, source=str(path)), source=str(path))

    async def save(self, context: str, records: Mapping[str, PlayerRecord]) -> None:
        path = self.path_for(context)
        for player_id in records:
            if not player_id.strip() or any(ch in player_id for ch in ",\r\n"):
                raise StorageError(
                    f"Player id {player_id!r} cannot be stored in {path.name}", context=context
                )
        payload = format_records(context, records.values())
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{context}.", suffix=".tmp", dir=self._directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write {path}", context=context) from exc


def parse_records(lines: Iterable[str], *, source: str = "<memory>") -> dict[str, PlayerRecord]:
    records: dict[str, PlayerRecord] = {}
    for lineno, line in enumerate(lines, start=1):
        record = parse_line(line)
        if record is None:
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                logger.warning("Skipping malformed player record %s:%d", source, lineno)
            continue
        records[record.player_id] = record
    return records


def parse_line(line: str) -> PlayerRecord | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    parts = [part.strip() for part in stripped.split(",")]
    if len(parts) < 3:
        return None
    player_id = parts[0]
    if not player_id:
        return None
    try:
        points = int(parts[1])
    except ValueError:
        return None

    forced_exit_count = 0
    if len(parts) > 4:
        try:
            forced_exit_count = int(parts[4])
        except ValueError:
            forced_exit_count = 0

    return PlayerRecord(
        player_id=player_id,
        points=points,
        unlocked=_parse_flag(parts[2]),
        session_open=len(parts) > 3 and _parse_flag(parts[3]),
        forced_exit_count=forced_exit_count,
    )


def format_records(context: str, records: Iterable[PlayerRecord]) -> str:
    lines = [f"# Player state for context {context}"]
    for record in records:
        lines.append(
            ",".join(
                (
                    record.player_id,
                    str(record.points),
                    _format_flag(record.unlocked),
                    _format_flag(record.session_open),
                    str(record.forced_exit_count),
                )
            )
        )
    return "\n".join(lines) + "\n"


def _parse_flag(value: str) -> bool:
    return value.strip().lower() == "true"


def _format_flag(value: bool) -> str:
    return "true" if value else "false"


def _decode_lines(raw: bytes, *, source: str) -> Iterator[str]:
    """Decode each line on its own; an undecodable line becomes blank."""
    for lineno, chunk in enumerate(raw.splitlines(), start=1):
        try:
            yield chunk.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Skipping undecodable player record %s:%d", source, lineno)
            yield ""
