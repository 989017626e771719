"""Content-addressed static asset pipeline.

:class:`StaticFiles` maps every static asset (bundled theme files plus the
book's additional CSS/JS) to its final name and writes it to the output
directory. The three phases run in order and each runs at most once:

1. construction collects the catalog and rejects duplicate logical names;
2. :meth:`StaticFiles.hash_files` fingerprints filenames with a short SHA-256
   digest (``css/general.css`` -> ``css/general-1a2b3c4d.css``);
3. :meth:`StaticFiles.write_files` resolves ``{{ resource "name" }}``
   directives inside CSS/JS assets, writes everything, and hands back the
   read-only name map for templates.

Example
-------
>>> from pathlib import Path
>>> from bookbinder.generator.static_files import StaticFiles
>>> files = StaticFiles({"book.js": b""}, [], Path("."))
>>> dict(files.hash_files())
{'book.js': 'book-e3b0c442.js'}
"""

from __future__ import annotations

import dataclasses as dc
import hashlib
import logging
import posixpath
import re
import shutil
import types
import typing as typ

from bookbinder.errors import (
    AssetNameCollisionError,
    AssetPipelineError,
    BookIoError,
)

from .paths import path_to_root, posix_text

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path, PurePath

logger = logging.getLogger(__name__)

RESOURCE_DIRECTIVE = re.compile(rb'\{\{ resource "([^"]+)" \}\}')
TEXT_ASSET_SUFFIXES = (".css", ".js")
UNHASHED_SUFFIXES = frozenset({"txt"})
# FontAwesome versions its own font URLs (``?v=4.7.0``)
UNHASHED_PREFIXES = ("FontAwesome/fonts/",)
DIGEST_BYTES = 4


@dc.dataclass(slots=True)
class BuiltinFile:
    """An asset whose bytes ship with the generator."""

    data: bytes
    filename: str


@dc.dataclass(slots=True)
class AdditionalFile:
    """A user asset read from disk when it is hashed or written."""

    input_location: Path
    filename: str


StaticFile = BuiltinFile | AdditionalFile


def fingerprint_name(filename: str, digest: str) -> str | None:
    """Return ``<base>-<digest>.<suffix>`` or ``None`` if ``filename`` is exempt.

    The basename is split at its first dot. Names with an empty base or
    suffix, ``.txt`` files, and legacy self-versioned assets keep their
    original names.

    >>> fingerprint_name("css/general.css", "0123abcd")
    'css/general-0123abcd.css'
    >>> fingerprint_name("fonts/OFL.txt", "0123abcd") is None
    True
    """
    if filename.startswith(UNHASHED_PREFIXES):
        return None
    directory, basename = posixpath.split(filename)
    base, _, suffix = basename.partition(".")
    if not base or not suffix:
        return None
    if suffix.rsplit(".", 1)[-1].lower() in UNHASHED_SUFFIXES:
        return None
    return posixpath.join(directory, f"{base}-{digest}.{suffix}")


def _short_digest(digest: typ.Any) -> str:  # noqa: ANN401
    return digest.digest()[:DIGEST_BYTES].hex()


def _is_text_asset(filename: str) -> bool:
    return filename.endswith(TEXT_ASSET_SUFFIXES)


def _write_file(destination: Path, filename: str, data: bytes) -> None:
    output = destination / filename
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
    except OSError as exc:
        msg = f"Unable to write {output}"
        raise BookIoError(msg) from exc


class StaticFiles:
    """Map static files to their final names and contents."""

    def __init__(
        self,
        builtin: cabc.Mapping[str, bytes],
        additional: cabc.Iterable[PurePath | str],
        root: Path,
    ) -> None:
        """Collect the asset catalog.

        Parameters
        ----------
        builtin : Mapping[str, bytes]
            Logical filename to bytes for every bundled asset, already
            filtered by the caller's configuration.
        additional : Iterable[PurePath | str]
            User asset paths relative to ``root``; each path doubles as the
            asset's logical name in the output tree.
        root : Path
            Directory that ``additional`` paths are resolved against.

        Raises
        ------
        AssetNameCollisionError
            If two assets share a logical filename.
        PathEncodingError
            If an additional path cannot be represented as UTF-8 text.
        """
        self._files: list[StaticFile] | None = []
        self._names: set[str] = set()
        self._hash_map: dict[str, str] = {}
        self._hashed = False
        for filename, data in builtin.items():
            self.add_builtin(filename, data)
        for custom_file in additional:
            filename = posixpath.normpath(posix_text(custom_file))
            self._push(AdditionalFile(input_location=root / custom_file, filename=filename))

    @property
    def hash_map(self) -> cabc.Mapping[str, str]:
        """Read-only view of original name -> fingerprinted name."""
        return types.MappingProxyType(self._hash_map)

    @property
    def filenames(self) -> list[str]:
        """Current logical filenames in catalog order."""
        return [static_file.filename for static_file in self._catalog()]

    def add_builtin(self, filename: str, data: bytes) -> None:
        """Add a bundled asset to the catalog."""
        self._push(BuiltinFile(data=bytes(data), filename=filename))

    def _push(self, static_file: StaticFile) -> None:
        catalog = self._catalog()
        if self._hashed:
            msg = "cannot add static files after they have been hashed"
            raise AssetPipelineError(msg)
        if static_file.filename in self._names:
            msg = f"Two static files are named {static_file.filename!r}"
            raise AssetNameCollisionError(msg)
        self._names.add(static_file.filename)
        catalog.append(static_file)

    def _catalog(self) -> list[StaticFile]:
        if self._files is None:
            msg = "static files have already been written"
            raise AssetPipelineError(msg)
        return self._files

    def hash_files(self) -> cabc.Mapping[str, str]:
        """Fingerprint every eligible asset's filename by its content.

        Identical bytes always produce the same digest, so rebuilding an
        unchanged book yields identical filenames.

        Returns
        -------
        Mapping[str, str]
            Read-only map from original to fingerprinted filename.

        Raises
        ------
        AssetPipelineError
            If the catalog was already hashed or written.
        BookIoError
            If an additional file cannot be read.
        """
        catalog = self._catalog()
        if self._hashed:
            msg = "static files have already been hashed"
            raise AssetPipelineError(msg)
        self._hashed = True
        for static_file in catalog:
            if fingerprint_name(static_file.filename, "0" * DIGEST_BYTES * 2) is None:
                continue
            match static_file:
                case BuiltinFile(data=data):
                    digest = _short_digest(hashlib.sha256(data))
                case AdditionalFile(input_location=location):
                    digest = self._digest_file(location)
            new_filename = fingerprint_name(static_file.filename, digest)
            if new_filename is None:  # pragma: no cover - checked above
                continue
            self._hash_map[static_file.filename] = new_filename
            static_file.filename = new_filename
        return self.hash_map

    @staticmethod
    def _digest_file(location: Path) -> str:
        try:
            with location.open("rb") as handle:
                return _short_digest(hashlib.file_digest(handle, "sha256"))
        except OSError as exc:
            msg = f"Unable to read static file {location} for hashing"
            raise BookIoError(msg) from exc

    def write_files(self, destination: Path) -> cabc.Mapping[str, str]:
        """Write every asset under ``destination`` exactly once.

        Parameters
        ----------
        destination : Path
            Root of the output tree.

        Returns
        -------
        Mapping[str, str]
            The final, read-only name map for template rendering.

        Raises
        ------
        AssetPipelineError
            If the files were already written by this instance.
        BookIoError
            If any file cannot be read, copied, or written.
        """
        files = self._catalog()
        self._files = None
        for static_file in files:
            match static_file:
                case BuiltinFile(data=data, filename=filename):
                    logger.debug("Writing builtin -> %s", filename)
                    if _is_text_asset(filename):
                        data = self._resolve_directives(data, filename)
                    _write_file(destination, filename, data)
                case AdditionalFile(input_location=location, filename=filename):
                    logger.debug("Copying %s -> %s", location, destination / filename)
                    self._write_additional(location, destination, filename)
        return self.hash_map

    def _write_additional(self, location: Path, destination: Path, filename: str) -> None:
        if _is_text_asset(filename):
            try:
                data = location.read_bytes()
            except OSError as exc:
                msg = f"Unable to read {location}"
                raise BookIoError(msg) from exc
            _write_file(destination, filename, self._resolve_directives(data, filename))
            return
        output = destination / filename
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(location, output)
        except OSError as exc:
            msg = f"Unable to copy {location} to {output}"
            raise BookIoError(msg) from exc

    def _resolve_directives(self, data: bytes, filename: str) -> bytes:
        """Replace ``{{ resource "name" }}`` with a path relative to ``filename``."""
        prefix = path_to_root(filename)

        def _repl(match: re.Match[bytes]) -> bytes:
            name = match.group(1).decode("utf-8", errors="replace")
            resolved = self._hash_map.get(name)
            if resolved is None:
                if name not in self._names:
                    logger.warning("Reference to unknown resource %r in %s", name, filename)
                resolved = name
            return f"{prefix}{resolved}".encode()

        return RESOURCE_DIRECTIVE.sub(_repl, data)


__all__ = [
    "AdditionalFile",
    "BuiltinFile",
    "StaticFile",
    "StaticFiles",
    "fingerprint_name",
]
