"""DocumentStore — the on-disk GeoJSON document behind the catalogue.

Every operation works on the whole document: load() reads and decodes it,
save() re-encodes and overwrites it. Nothing is cached between calls.
"""

from __future__ import annotations

import contextlib
import os
import stat
import tempfile
import threading
from pathlib import Path
from typing import Iterator

from loguru import logger

from catalogue.feature import (
    DEFAULT_COLLECTION_NAME,
    DEFAULT_CRS_NAME,
    FeatureCollection,
    default_crs,
)
from catalogue.geojson import dump_collection, parse_collection


class DocumentStore:
    """Loads and saves the catalogue document at a fixed path.

    Args:
        path: Location of the GeoJSON file.
        default_name: Collection name used when the document is missing.
        default_crs_name: CRS name used when the document is missing.
        serialize_writes: When True, writing() holds a lock so concurrent
            load-mutate-save sequences in this process run one at a time.
    """

    def __init__(
        self,
        path: str | Path,
        default_name: str = DEFAULT_COLLECTION_NAME,
        default_crs_name: str = DEFAULT_CRS_NAME,
        serialize_writes: bool = True,
    ) -> None:
        self.path = Path(path)
        self._default_name = default_name
        self._default_crs_name = default_crs_name
        self._write_lock = threading.Lock() if serialize_writes else None

    def empty(self) -> FeatureCollection:
        """A well-formed collection with no features and default metadata."""
        return FeatureCollection(
            name=self._default_name,
            crs=default_crs(self._default_crs_name),
            features=[],
        )

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> FeatureCollection:
        """Read the document. Missing or malformed files load as empty."""
        try:
            content = self.path.read_text(encoding="utf-8")
            return parse_collection(content)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading GeoJSON file {self.path}: {e}")
            return self.empty()

    def save(self, collection: FeatureCollection) -> bool:
        """Overwrite the document with the given collection.

        Writes a temp file in the same directory and renames it over the
        target, keeping the permission bits of the document it replaces.
        Returns False if anything fails; the old document is kept.
        """
        tmp_name = None
        try:
            content = dump_collection(collection)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.chmod(tmp_name, _file_mode(self.path))
            os.replace(tmp_name, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing GeoJSON file {self.path}: {e}")
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            return False

    def bootstrap(self) -> bool:
        """Create an empty document if none exists.

        Returns:
            True if a new file was written, False if one was already there
            or it could not be created.
        """
        if self.exists():
            logger.info(f"GeoJSON file found: {self.path}")
            return False
        logger.info(f"GeoJSON file not found. Creating initial file at {self.path}...")
        created = self.save(self.empty())
        if created:
            logger.info("Initial GeoJSON file created.")
        return created

    @contextlib.contextmanager
    def writing(self) -> Iterator[None]:
        """Hold the single-writer lock for a load-mutate-save sequence."""
        if self._write_lock is None:
            yield
            return
        with self._write_lock:
            yield


def _file_mode(path: Path) -> int:
    """Permission bits for the document: the current file's, else umask default."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask
