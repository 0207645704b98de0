"""Declarations collected from model files: entities, fields, indexes and imports."""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from dataclasses import field as dc_field
from datetime import datetime
from enum import IntEnum
from typing import Any

from argen import errors
from argen.errors import (
    ErrParseFlagDecl,
    ErrParseImportDecl,
    ErrParseMutatorDecl,
    ErrParseSerializerDecl,
    ErrParseTriggerDecl,
    ErrParseTypeFieldDecl,
    ErrParseTypeIndexDecl,
)

PROC_INPUT_PARAM = "input"
PROC_OUTPUT_PARAM = "output"

INC_MUTATOR = "inc"
DEC_MUTATOR = "dec"
SET_BIT_MUTATOR = "set_bit"
CLEAR_BIT_MUTATOR = "clear_bit"
AND_MUTATOR = "and"
OR_MUTATOR = "or"
XOR_MUTATOR = "xor"

FIELD_MUTATORS = (
    INC_MUTATOR,
    DEC_MUTATOR,
    SET_BIT_MUTATOR,
    CLEAR_BIT_MUTATOR,
    AND_MUTATOR,
    OR_MUTATOR,
    XOR_MUTATOR,
)

_FIELD_MUTATOR_SET = frozenset(FIELD_MUTATORS)

PKG_NAME_RX = re.compile(r'([^/"]+)"?$')


def field_mutators() -> frozenset[str]:
    """Names of the built-in field mutators."""
    return _FIELD_MUTATOR_SET


def get_import_name(path: str) -> str:
    """Package name of an import path: its last path element, quotes stripped."""
    match = PKG_NAME_RX.search(path)
    if match is None:
        raise ErrParseImportDecl(name=path, err=errors.NAME_DECLARATION)
    return match.group(1)


def _now_rfc3339() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


@dataclass
class AppInfo:
    """Information about the generator build, stamped into generated files."""

    version: str = ""
    build_time: str = ""
    build_os: str = ""
    build_commit: str = ""
    app_name: str = "argen"
    generate_time: str = dc_field(default_factory=_now_rfc3339)

    def __str__(self) -> str:
        return f"{self.app_name}@{self.version} (Commit: {self.build_commit})"


@dataclass
class NamespaceDeclaration:
    """Namespace (space or table) of an entity."""

    object_name: str = ""
    public_name: str = ""
    package_name: str = ""
    module_name: str = ""


@dataclass
class ServerDeclaration:
    """Server of an entity: either a config path or a host and port."""

    timeout: int = 0
    host: str = ""
    port: str = ""
    conf: str = ""


@dataclass(frozen=True)
class ImportDeclaration:
    """An additional import of a generated package."""

    path: str = ""
    import_name: str = ""


@dataclass
class ImportPackage:
    """Ordered imports with lookup by path and by package name."""

    imports: list[ImportDeclaration] = dc_field(default_factory=list)
    import_map: dict[str, int] = dc_field(default_factory=dict)
    import_pkg_map: dict[str, int] = dc_field(default_factory=dict)

    def add_import(self, path: str, *args: str) -> ImportDeclaration:
        """Add an import, optionally under an alias, and return it.

        Re-adding an existing import returns the stored one; a different path
        under an already used package name raises.
        """
        if len(args) > 1:
            raise ErrParseImportDecl(path=path, err=errors.INVALID_PARAMS)

        try:
            search_name = get_import_name(path)
        except ErrParseImportDecl:
            raise ErrParseImportDecl(
                path=path, name="UNKNOWN", err=errors.GET_IMPORT_NAME
            ) from None

        result_name = ""
        if args and args[0]:
            if args[0] != search_name:
                result_name = args[0]
            search_name = args[0]

        idx = self.import_map.get(path)
        if idx is not None and self.imports[idx].import_name == result_name:
            return self.imports[idx]

        idx = self.import_pkg_map.get(search_name)
        if idx is not None:
            if self.imports[idx].path != path:
                raise ErrParseImportDecl(path=path, name=search_name, err=errors.DUPLICATE)
            return self.imports[idx]

        new_import = ImportDeclaration(path=path, import_name=result_name)
        self.import_map[path] = len(self.imports)
        self.import_pkg_map[search_name] = len(self.imports)
        self.imports.append(new_import)
        return new_import

    def find_import(self, path: str) -> ImportDeclaration:
        """Import with the given path."""
        idx = self.import_map.get(path)
        if idx is None:
            raise ErrParseImportDecl(path=path, err=errors.PARSE_IMPORT_NOT_FOUND)
        return self.imports[idx]

    def find_import_by_pkg(self, pkg: str) -> ImportDeclaration:
        """Import with the given package name or alias."""
        idx = self.import_pkg_map.get(pkg)
        if idx is None:
            raise ErrParseImportDecl(name=pkg, err=errors.PARSE_IMPORT_NOT_FOUND)
        return self.imports[idx]

    def find_or_add_import(self, path: str, import_name: str) -> ImportDeclaration:
        """Import with the given path, added under ``import_name`` if missing."""
        try:
            return self.find_import(path)
        except ErrParseImportDecl as exc:
            if exc.err is not errors.PARSE_IMPORT_NOT_FOUND:
                raise
        return self.add_import(path, import_name)


class IndexOrder(IntEnum):
    """Sort direction of a field inside an index."""

    ASC = 0
    DESC = 1


@dataclass
class IndexField:
    """Position of a field in an index and its sort direction."""

    ind_field: int = 0
    order: IndexOrder = IndexOrder.ASC


@dataclass
class IndexDeclaration:
    """An index of an entity."""

    name: str = ""
    num: int = 0
    selector: str = ""
    fields: list[int] = dc_field(default_factory=list)
    fields_map: dict[str, IndexField] = dc_field(default_factory=dict)
    primary: bool = False
    unique: bool = False
    type: str = ""
    partial: bool = False


class Serializer(list):
    """Serializer name followed by its constant parameters."""

    def name(self) -> str:
        """Serializer name, or an empty string when none is set."""
        return self[0] if self else ""

    def params(self) -> str:
        """Constant parameters rendered as quoted call arguments."""
        if len(self) > 1:
            return '"' + '", "'.join(self[1:]) + '", '
        return ""


@dataclass
class FieldDeclaration:
    """A field of an entity."""

    name: str = ""
    format: Any = ""
    primary_key: bool = False
    mutators: list[str] = dc_field(default_factory=list)
    size: int = 0
    serializer: Serializer = dc_field(default_factory=Serializer)
    object_link: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.serializer, Serializer):
            self.serializer = Serializer(self.serializer)


class ProcParameterType(IntEnum):
    """Direction of a procedure parameter."""

    UNDEFINED = 0
    IN = 1
    OUT = 2
    INOUT = 3

    def __str__(self) -> str:
        if self is ProcParameterType.IN:
            return PROC_INPUT_PARAM
        if self is ProcParameterType.OUT:
            return PROC_OUTPUT_PARAM
        if self is ProcParameterType.INOUT:
            return f"{PROC_INPUT_PARAM}/{PROC_OUTPUT_PARAM}"
        return ""


@dataclass
class ProcFieldDeclaration:
    """A parameter of a procedure."""

    name: str = ""
    format: Any = ""
    type: ProcParameterType = ProcParameterType.UNDEFINED
    size: int = 0
    serializer: Serializer = dc_field(default_factory=Serializer)
    order_index: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.serializer, Serializer):
            self.serializer = Serializer(self.serializer)


class ProcFieldDeclarations(dict):
    """Procedure output parameters keyed by their position in the call."""

    def add(self, field: ProcFieldDeclaration) -> None:
        """Add a parameter; its position must not be taken yet."""
        if field.order_index in self:
            raise errors.PROC_FIELD_DUPLICATE_ORDER_INDEX
        self[field.order_index] = field

    def list(self) -> "list[ProcFieldDeclaration]":
        """Parameters in call order; positions must run from 0 without gaps."""
        try:
            return [self[idx] for idx in range(len(self))]
        except KeyError:
            raise IndexError("procedure field positions are not contiguous") from None

    def validate(self) -> bool:
        """Whether no position lies beyond the number of parameters."""
        if not self:
            return True
        return max(0, *self.keys()) < len(self)


@dataclass
class FieldObject:
    """A link from a field to the key of another entity."""

    name: str = ""
    key: str = ""
    object_name: str = ""
    field: str = ""
    unique: bool = False


@dataclass
class SerializerDeclaration:
    """A serializer used by fields of an entity."""

    name: str = ""
    pkg: str = ""
    type: str = ""
    import_name: str = ""
    marshaler: str = ""
    unmarshaler: str = ""


@dataclass
class PartialFieldDeclaration:
    """A part of a field changed by a custom mutator."""

    name: str = ""
    type: str = ""


@dataclass
class MutatorDeclaration:
    """A custom mutator used by fields of an entity."""

    name: str = ""
    pkg: str = ""
    type: str = ""
    import_name: str = ""
    update: str = ""
    replace: str = ""
    partial_fields: list[PartialFieldDeclaration] = dc_field(default_factory=list)


@dataclass
class TriggerDeclaration:
    """A trigger of an entity."""

    name: str = ""
    pkg: str = ""
    func: str = ""
    import_name: str = ""
    params: dict[str, bool] = dc_field(default_factory=dict)


@dataclass
class FlagDeclaration:
    """Named flags of a field."""

    name: str = ""
    flags: list[str] = dc_field(default_factory=list)


@dataclass
class LinkedPackageDeclaration:
    """Types of a linked package and how to import it."""

    types: set[str] = dc_field(default_factory=set)
    import_package: ImportPackage = dc_field(default_factory=ImportPackage)


@dataclass
class RecordPackage(ImportPackage):
    """Everything declared for one entity."""

    server: ServerDeclaration = dc_field(default_factory=ServerDeclaration)
    namespace: NamespaceDeclaration = dc_field(default_factory=NamespaceDeclaration)
    fields: list[FieldDeclaration] = dc_field(default_factory=list)
    fields_map: dict[str, int] = dc_field(default_factory=dict)
    fields_object_map: dict[str, FieldObject] = dc_field(default_factory=dict)
    indexes: list[IndexDeclaration] = dc_field(default_factory=list)
    index_map: dict[str, int] = dc_field(default_factory=dict)
    selector_map: dict[str, int] = dc_field(default_factory=dict)
    backends: list[str] = dc_field(default_factory=list)
    serializer_map: dict[str, SerializerDeclaration] = dc_field(default_factory=dict)
    mutator_map: dict[str, MutatorDeclaration] = dc_field(default_factory=dict)
    trigger_map: dict[str, TriggerDeclaration] = dc_field(default_factory=dict)
    flag_map: dict[str, FlagDeclaration] = dc_field(default_factory=dict)
    proc_in_fields: list[ProcFieldDeclaration] = dc_field(default_factory=list)
    proc_out_fields: ProcFieldDeclarations = dc_field(default_factory=ProcFieldDeclarations)
    proc_fields_map: dict[str, int] = dc_field(default_factory=dict)
    linked_structs_map: dict[str, LinkedPackageDeclaration] = dc_field(default_factory=dict)
    import_struct_fields_map: dict[str, list[PartialFieldDeclaration]] = dc_field(
        default_factory=dict
    )

    def add_field(self, field: FieldDeclaration) -> None:
        """Add a field; names must be unique."""
        if field.name in self.fields_map:
            raise ErrParseTypeFieldDecl(
                name=field.name, field_type=str(field.format), err=errors.REDEFINED
            )
        self.fields_map[field.name] = len(self.fields)
        self.fields.append(field)

    def add_proc_field(self, field: ProcFieldDeclaration) -> None:
        """Add a procedure parameter to the inputs, the outputs or both."""
        if field.name in self.proc_fields_map:
            raise ErrParseTypeFieldDecl(
                name=field.name, field_type=str(field.format), err=errors.REDEFINED
            )
        self.proc_fields_map[field.name] = len(self.proc_fields_map)

        if field.type in (ProcParameterType.IN, ProcParameterType.INOUT):
            self.proc_in_fields.append(field)

        if field.type in (ProcParameterType.OUT, ProcParameterType.INOUT):
            try:
                self.proc_out_fields.add(field)
            except errors.ArgenError as exc:
                raise ErrParseTypeFieldDecl(
                    name=field.name, field_type=str(field.type), err=exc
                ) from exc

    def add_field_object(self, field_object: FieldObject) -> None:
        """Add a link to another entity; names must be unique."""
        if field_object.name in self.fields_object_map:
            raise ErrParseTypeFieldDecl(name=field_object.name, err=errors.REDEFINED)
        self.fields_object_map[field_object.name] = field_object

    def add_index(self, index: IndexDeclaration) -> None:
        """Add an index, filling in its selector, uniqueness and number."""
        if index.name in self.index_map:
            raise ErrParseTypeIndexDecl(index_type="index", name=index.name, err=errors.REDEFINED)

        ind = dataclasses.replace(index)

        if (ind.primary or ind.unique) and not ind.selector:
            ind.selector = "SelectBy" + ind.name

        if ind.selector in self.selector_map:
            raise ErrParseTypeIndexDecl(index_type="index", name=ind.name, err=errors.REDEFINED)

        if ind.primary:
            ind.unique = True
            for field_num in ind.fields:
                self.fields[field_num].primary_key = True

        if not ind.partial and ind.num == 0 and self.indexes:
            ind.num = (self.indexes[-1].num + 1) % 256

        self.index_map[ind.name] = len(self.indexes)
        self.selector_map[ind.selector] = len(self.indexes)
        self.indexes.append(ind)

    def add_trigger(self, trigger: TriggerDeclaration) -> None:
        """Add a trigger; names must be unique."""
        if trigger.name in self.trigger_map:
            raise ErrParseTriggerDecl(name=trigger.name, err=errors.REDEFINED)
        self.trigger_map[trigger.name] = trigger

    def add_serializer(self, serializer: SerializerDeclaration) -> None:
        """Add a serializer; names must be unique."""
        if serializer.name in self.serializer_map:
            raise ErrParseSerializerDecl(name=serializer.name, err=errors.REDEFINED)
        self.serializer_map[serializer.name] = serializer

    def add_flag(self, flag: FlagDeclaration) -> None:
        """Add field flags; names must be unique."""
        if flag.name in self.flag_map:
            raise ErrParseFlagDecl(name=flag.name, err=errors.DUPLICATE)
        self.flag_map[flag.name] = flag

    def add_mutator(self, mutator: MutatorDeclaration) -> None:
        """Add a custom mutator; names must be unique."""
        if mutator.name in self.mutator_map:
            raise ErrParseMutatorDecl(name=mutator.name, err=errors.REDEFINED)
        self.mutator_map[mutator.name] = mutator

    def add_partial_field(self, mutator: MutatorDeclaration) -> None:
        """Add a mutator that changes parts of a field; names must be unique."""
        if mutator.name in self.mutator_map:
            raise ErrParseMutatorDecl(name=mutator.name, err=errors.REDEFINED)
        self.mutator_map[mutator.name] = mutator