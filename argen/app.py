"""Preparing directories and packages for repository generation."""

from __future__ import annotations

import logging
import os
import posixpath
import re
import threading
from collections.abc import Iterable

from argen import errors
from argen.ds import AppInfo, RecordPackage
from argen.errors import ArgenError, ErrGeneratorFile, ErrParseGenDecl
from argen.generator import GenerateFile

log = logging.getLogger(__name__)

# Package names: lower-case latin letters only, at most 20 of them.
_PKG_NAME_RX = re.compile(r"^[a-z]{1,20}$")

# Paths take part in import paths, so they may not start with a dot.
_PATH_RX = re.compile(r"^[^.]")

SPEC_FILE = ".argen"
META_FILE = "repository.go"


def _join(*parts: str) -> str:
    """Join non-empty path parts and normalise the result."""
    nonempty = [part for part in parts if part]
    if not nonempty:
        return ""
    return os.path.normpath(os.path.join(*nonempty))


def _module_join(*parts: str) -> str:
    """Join non-empty parts of an import path with slashes."""
    nonempty = [part for part in parts if part]
    if not nonempty:
        return ""
    return posixpath.normpath("/".join(nonempty))


def write_to_file(dir_pkg: str, dst_file_name: str, data: bytes) -> None:
    """Write ``data`` to ``dst_file_name`` inside ``dir_pkg``, creating the directory."""
    if not dst_file_name.startswith(dir_pkg):
        raise ArgenError("dstFileName must be into dstDir")

    try:
        os.stat(dir_pkg)
    except FileNotFoundError:
        try:
            os.mkdir(dir_pkg, 0o700)
        except OSError as exc:
            raise ArgenError(f"error create dir while save to file: {exc}") from exc
    except OSError as exc:
        raise ArgenError(f"save generated package to file error: {exc}") from exc

    try:
        with open(dst_file_name, "wb") as dst_file:
            dst_file.write(data)
    except OSError as exc:
        raise ArgenError(f"error write to file: {exc}") from exc


def _read_dir(path: str) -> list[os.DirEntry]:
    with os.scandir(path) as entries:
        return sorted(entries, key=lambda entry: entry.name)


class ArGen:
    """Generation state: source and destination directories and parsed packages.

    ``src`` holds the declarations, ``dst`` receives the generated packages and
    ``dst_fixture`` the fixture stores (skipped when empty). Files found in
    ``dst`` before generation and not regenerated end up in ``file_to_remove``.
    """

    def __init__(
        self,
        app_info: AppInfo,
        src_dir: str,
        dst_dir: str,
        fixture_dir: str,
        mod_name: str,
    ) -> None:
        self.app_info = app_info
        self.src = src_dir
        self.dst = dst_dir
        self.dst_fixture = fixture_dir
        self.mod_name = mod_name
        self.src_entry: list[os.DirEntry] = []
        self.dst_entry: list[os.DirEntry] = []
        self.packages_parsed: dict[str, RecordPackage] = {}
        self.packages_linked: dict[str, str] = {}
        self.file_to_remove: set[str] = set()
        self._lock = threading.Lock()

        try:
            self._prepare_dir()
        except ArgenError as exc:
            raise ArgenError(f"error prepare dirs: {exc}") from exc

    def skip_generate_fixture(self) -> bool:
        """Whether fixture stores are left out because no directory was given."""
        return not self.dst_fixture

    def _prepare_dir(self) -> None:
        if not _PATH_RX.match(self.src):
            raise ArgenError("invalid path repository declaration")
        if not _PATH_RX.match(self.dst):
            raise ArgenError("invalid path repository generation")

        try:
            self.src_entry = _read_dir(self.src)
        except OSError as exc:
            raise ArgenError(
                f"error open dir `{self.src}` with repository declaration: {exc}"
            ) from exc

        try:
            self.dst_entry = _read_dir(self.dst)
        except FileNotFoundError:
            try:
                os.mkdir(self.dst, 0o750)
            except OSError as exc:
                raise ArgenError(
                    f"error create dir `{self.dst}` for repository generation: {exc}"
                ) from exc
            spec = os.path.join(self.dst, SPEC_FILE)
            try:
                with open(spec, "wb") as spec_file:
                    spec_file.write(b"DO NOT DELETE THIS FILE")
                os.chmod(spec, 0o600)
            except OSError as exc:
                raise ArgenError(
                    f"error create spec file `.argen` for repository generation: {exc}"
                ) from exc
            self.dst_entry = []
        except OSError as exc:
            raise ArgenError(
                f"error open dir `{self.dst}` for repository generation: {exc}"
            ) from exc
        else:
            if not os.path.exists(os.path.join(self.dst, SPEC_FILE)):
                raise ArgenError("destination directory not empty and hasn't .argen special file")

    def add_record_package(self, pkg_name: str) -> RecordPackage:
        """Register a new declaration package and return its empty record."""
        with self._lock:
            if not _PKG_NAME_RX.match(pkg_name):
                raise ErrParseGenDecl(name=pkg_name, err=errors.BAD_PKG_NAME)
            if pkg_name in self.packages_parsed:
                raise ErrParseGenDecl(name=pkg_name, err=errors.REDEFINED)
            record = RecordPackage()
            self.packages_parsed[pkg_name] = record
            return record

    def prepare_check(self) -> None:
        """Fill in import paths, index package names and note existing files."""
        for key, pkg in self.packages_parsed.items():
            pkg.namespace.module_name = _module_join(
                self.mod_name, self.dst, pkg.namespace.package_name
            )
            self.packages_linked[pkg.namespace.package_name] = key

        try:
            exists = self.get_exists()
        except ArgenError as exc:
            raise ArgenError(f"can't get exists files: {exc}") from exc

        self.file_to_remove.update(exists)

    def _linked_package(self, name: str) -> RecordPackage:
        return self.packages_parsed[self.packages_linked[name]]

    def _import_linked(self, cl: RecordPackage) -> dict[str, RecordPackage]:
        linked: dict[str, RecordPackage] = {}
        for fo in cl.fields_object_map.values():
            package = self._linked_package(fo.object_name)
            linked[fo.object_name] = package
            try:
                cl.find_or_add_import(
                    package.namespace.module_name, package.namespace.package_name
                )
            except ArgenError as exc:
                raise ArgenError(
                    f"error process `{fo.object_name}` linkObject for package "
                    f"`{cl.namespace.public_name}`: {exc}"
                ) from exc
        return linked

    def prepare_generate(self, cl: RecordPackage) -> dict[str, RecordPackage]:
        """Import linked packages into ``cl``, set index types, return the links."""
        linked = self._import_linked(cl)

        for index in cl.indexes:
            if len(index.fields) > 1:
                index.type = index.name + "IndexType"
            else:
                index.type = str(cl.fields[index.fields[0]].format)

        return linked

    def prepare_fixture_generate(self, cl: RecordPackage, name: str) -> None:
        """Import linked packages and the package ``name`` itself into ``cl``."""
        self._import_linked(cl)

        record = self._linked_package(name)
        try:
            cl.find_or_add_import(record.namespace.module_name, name)
        except ArgenError as exc:
            raise ArgenError(
                f"error process `{name}` add import declaration for package "
                f"`{cl.namespace.public_name}`: {exc}"
            ) from exc

    def save_generate_result(
        self, name: str, dst: str, gen_res: Iterable[GenerateFile]
    ) -> None:
        """Write generated files under ``dst`` and keep them from being removed."""
        for gen in gen_res:
            dir_pkg = _join(dst, gen.dir)
            dst_file_name = _join(dir_pkg, gen.name)

            log.info("Write package `%s` (%s) into file `%s`", name, dst_file_name, dst_file_name)

            try:
                write_to_file(dir_pkg, dst_file_name, gen.data)
            except ArgenError as exc:
                raise ErrGeneratorFile(
                    name=name, backend=gen.backend, filename=dst_file_name, err=exc
                ) from exc

            if dst_file_name in self.file_to_remove:
                log.info("Replace file: %s", dst_file_name)
                self.file_to_remove.discard(dst_file_name)
            else:
                log.info("Create file: %s", dst_file_name)

            if dir_pkg in self.file_to_remove:
                log.info("Replace dir: %s", dir_pkg)
                self.file_to_remove.discard(dir_pkg)

    def prepare_fixtures_storage(self) -> None:
        """Create the fixture data directory and empty store files of every package."""
        if not _PATH_RX.match(self.dst_fixture):
            raise ArgenError("invalid path for fixture generation")

        store_path = _join(self.dst_fixture, "data")
        try:
            _read_dir(store_path)
        except FileNotFoundError:
            try:
                os.makedirs(store_path, 0o750, exist_ok=True)
            except OSError as exc:
                raise ArgenError(
                    f"error create dir `{store_path}` for fixture storage: {exc}"
                ) from exc
        except OSError as exc:
            raise ArgenError(f"error open dir `{store_path}` for fixture storage: {exc}") from exc

        for name, pkg in self.packages_parsed.items():
            suffixes = [""] if pkg.proc_fields_map else ["", "_update", "_insert_replace"]
            for suffix in suffixes:
                storage = os.path.join(store_path, name + suffix + ".yaml")
                try:
                    os.stat(storage)
                except FileNotFoundError:
                    try:
                        fd = os.open(storage, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o777)
                        os.close(fd)
                    except OSError as exc:
                        raise ArgenError(
                            f"error create storage file for {name} fixture storage: {exc}"
                        ) from exc
                except OSError as exc:
                    raise ArgenError(
                        f"error check file  for {name} fixture storage: {exc}"
                    ) from exc

    def get_exists(self) -> list[str]:
        """Package directories and files found in the destination before generation."""
        exists: list[str] = []

        for entry in self.dst_entry:
            if entry.name in (SPEC_FILE, META_FILE):
                continue

            if not entry.is_dir(follow_symlinks=False):
                raise ArgenError(
                    f"destination folder can contain only dirs. `{entry.name}` not a dir"
                )

            repo_dir = _join(self.dst, entry.name)
            exists.append(repo_dir)

            try:
                go_files = _read_dir(repo_dir)
            except OSError as exc:
                raise ArgenError(
                    f"can'r read destination repository folder({entry.name}): {exc}"
                ) from exc

            for go_file in go_files:
                if entry.name.endswith(".go"):
                    continue
                if go_file.is_dir(follow_symlinks=False) or not go_file.is_file(
                    follow_symlinks=False
                ):
                    raise ArgenError(
                        "destination repository folder can contain only go files. "
                        f"`{go_file.name}` is not a go-file"
                    )
                exists.append(_join(repo_dir, go_file.name))

        return exists