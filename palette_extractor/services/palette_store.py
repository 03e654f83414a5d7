"""
JSON-file backed store of saved palettes.

The whole newest-first sequence lives under one key of a JSON document and is
rewritten on every mutation through a temp file that replaces the original,
so a failed write never leaves a half-written store behind. One lock guards
each read-modify-persist cycle, and every mutation re-reads the file inside it,
so several stores on one path in the same process never drop each other's
records. The lock is per process; concurrent writer processes are not
serialized.
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Optional, Sequence, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from palette_extractor.config import config
from palette_extractor.errors import InvalidPaletteError, StorageCorruptError, StorageIOError
from palette_extractor.schemas import SavedPalette
from palette_extractor.services.colors.hex_codec import normalize_palette
from palette_extractor.services.imaging import to_data_uri
from palette_extractor.utils.ids import generate_palette_id

_palettes_adapter = TypeAdapter(List[SavedPalette])

# One lock per store file, shared by every PaletteStore on that path
_path_locks = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: Path):
    with _path_locks_guard:
        return _path_locks.setdefault(str(path.resolve()), threading.RLock())


class PaletteStore:
    """Ordered, durable collection of saved palettes (newest first)."""

    def __init__(self, path: Union[str, Path], key: Optional[str] = None) -> None:
        self._path = Path(path)
        self._key = key or config.STORE_KEY
        self._lock = _lock_for(self._path)
        self._palettes: List[SavedPalette] = []
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[SavedPalette]:
        """
        Read the persisted palettes, replacing the in-memory sequence.

        A missing, empty or unparseable file yields an empty store.

        Raises:
            StorageIOError: If the file exists but cannot be read
        """
        with self._lock:
            try:
                self._palettes = self._read()
            except StorageCorruptError as e:
                logger.warning(f"Palette store {self._path} is corrupt, starting empty: {e}")
                self._palettes = []
            self._loaded = True
            return list(self._palettes)

    def list(self) -> List[SavedPalette]:
        """Snapshot of saved palettes, newest first."""
        with self._lock:
            self._ensure_loaded()
            return list(self._palettes)

    def get(self, palette_id: str) -> Optional[SavedPalette]:
        """Return the palette with the given id, or None."""
        with self._lock:
            self._ensure_loaded()
            return next((p for p in self._palettes if p.id == palette_id), None)

    def save(self, colors: Sequence[str], source_image: Union[str, bytes]) -> SavedPalette:
        """
        Create a palette record, prepend it and persist the store.

        Args:
            colors: Hex colors in palette order; normalized to #rrggbb
            source_image: Image URI, or raw image bytes stored as a data URI

        Returns:
            The created SavedPalette

        Raises:
            MalformedHexError: If a color is not a hex color
            InvalidPaletteError: If the palette is empty or too long
            StorageIOError: If the store cannot be read or written; the store is unchanged

        The file is re-read under the lock before the new record is prepended.
        Only writers in this process are serialized; run a single writer
        process per store file.
        """
        if isinstance(colors, str):
            raise InvalidPaletteError("colors must be a sequence of hex strings")
        canonical = normalize_palette(colors)
        if not 1 <= len(canonical) <= config.MAX_K:
            raise InvalidPaletteError(f"palette must have 1-{config.MAX_K} colors, got {len(canonical)}")
        if isinstance(source_image, (bytes, bytearray)):
            source_image = to_data_uri(bytes(source_image))

        with self._lock:
            self._reload()
            record = SavedPalette(id=self._fresh_id(), colors=canonical, source_image=source_image)
            updated = [record] + self._palettes
            self._write(updated)
            self._palettes = updated

        logger.info(f"Saved palette {record.id} with {len(record.colors)} colors")
        return record

    def delete(self, palette_id: str) -> bool:
        """
        Remove a palette by id and persist the store.

        Returns:
            True if a palette was removed, False if the id was unknown

        Raises:
            StorageIOError: If the store cannot be written; the store is unchanged
        """
        with self._lock:
            self._reload()
            updated = [p for p in self._palettes if p.id != palette_id]
            if len(updated) == len(self._palettes):
                logger.info(f"Delete of unknown palette {palette_id} ignored")
                return False
            self._write(updated)
            self._palettes = updated

        logger.info(f"Deleted palette {palette_id}")
        return True

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def _reload(self) -> None:
        # Pick up records written by other stores on the same path
        self.load()

    def _fresh_id(self) -> str:
        existing = {p.id for p in self._palettes}
        palette_id = generate_palette_id()
        while palette_id in existing:
            palette_id = generate_palette_id()
        return palette_id

    def _read(self) -> List[SavedPalette]:
        try:
            body = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info(f"No palette store at {self._path}, starting empty")
            return []
        except UnicodeDecodeError as e:
            raise StorageCorruptError(f"not UTF-8 text: {e}") from e
        except OSError as e:
            logger.error(f"Failed to read palette store {self._path}: {e}")
            raise StorageIOError(f"Failed to read palette store {self._path}: {e}") from e

        if not body.strip():
            logger.info(f"Palette store {self._path} is empty")
            return []

        try:
            document = json.loads(body)
        except json.JSONDecodeError as e:
            raise StorageCorruptError(f"invalid JSON: {e}") from e

        if not isinstance(document, dict) or self._key not in document:
            raise StorageCorruptError(f"missing key {self._key!r}")

        try:
            palettes = _palettes_adapter.validate_python(document[self._key])
        except ValidationError as e:
            raise StorageCorruptError(f"invalid palette records: {e.error_count()} error(s)") from e

        logger.info(f"Loaded {len(palettes)} palette(s) from {self._path}")
        return palettes

    def _write(self, palettes: List[SavedPalette]) -> None:
        document = {self._key: [p.to_record() for p in palettes]}
        body = json.dumps(document, ensure_ascii=False, indent=2)

        tmp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(body)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            logger.error(f"Failed to write palette store {self._path}: {e}")
            raise StorageIOError(f"Failed to write palette store {self._path}: {e}") from e


# Global store instance
_store: Optional[PaletteStore] = None


def get_palette_store() -> PaletteStore:
    """Get or create the process-wide store at config.STORE_PATH."""
    global _store
    if _store is None:
        _store = PaletteStore(config.STORE_PATH)
        _store.load()
    return _store
