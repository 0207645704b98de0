"""Error types raised while parsing, checking and generating repositories."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any


class ArgenError(Exception):
    """Base class of every error raised by the generator."""


def _label(name: str) -> str:
    return "".join(part.capitalize() for part in name.rstrip("_").split("_"))


def error_base(err: Any) -> str:
    """Render a structured error: its class name, its fields and the nested error.

    The nested error (the ``err`` field) is printed on its own indented line,
    so errors wrapped in one another read from the outermost to the innermost.
    """
    parts = []
    for fld in fields(err):
        value = getattr(err, fld.name)
        if fld.metadata.get("show") == "type":
            text = type(value).__name__
        else:
            text = str(value)
        if fld.name == "err":
            parts.append("\n\t" + text)
        else:
            parts.append(f"{_label(fld.name)}: `{text}`")
    return f"{type(err).__name__} " + "; ".join(parts)


class DeclarationError(ArgenError):
    """Structured error whose fields describe where the problem was found."""

    def __str__(self) -> str:
        return error_base(self)


def _type_field() -> Any:
    return field(default=None, metadata={"show": "type"})


# --- generic -------------------------------------------------------------

BAD_PKG_NAME = ArgenError("bad package name")

# --- checker -------------------------------------------------------------

CHECK_BACKEND_EMPTY = ArgenError("backend empty")
CHECK_BACKEND_UNKNOWN = ArgenError("backend unknown")
CHECK_EMPTY_NAMESPACE = ArgenError("empty namespace")
CHECK_PKG_BACKEND_TO_MATCH = ArgenError("many backends for one class not supported yet")
CHECK_FIELD_SERIALIZER_NOT_FOUND = ArgenError("serializer not found")
CHECK_FIELD_SERIALIZER_NOT_SUPPORTED = ArgenError("serializer not supported")
CHECK_FIELD_INVALID_FORMAT = ArgenError("invalid format")
CHECK_FIELD_MUTATOR_CONFLICT_PK = ArgenError("conflict mutators with primary_key")
CHECK_FIELD_MUTATOR_CONFLICT_SERIALIZER = ArgenError("conflict mutators with serializer")
CHECK_FIELD_MUTATOR_CONFLICT_OBJECT = ArgenError("conflict mutators with object link")
CHECK_FIELD_SERIALIZER_CONFLICT_OBJECT = ArgenError("conflict serializer with object link")
CHECK_SERVER_EMPTY = ArgenError("serverConf and serverHost is empty")
CHECK_PORT_EMPTY = ArgenError("serverPort is empty")
CHECK_SERVER_CONFLICT = ArgenError("conflict ServerHost and serverConf params")
CHECK_FIELD_INDEX_EMPTY = ArgenError("field for index is empty")
CHECK_OBJECT_NOT_FOUND = ArgenError("linked object not found")
CHECK_FIELD_TYPE_NOT_FOUND = ArgenError("procedure field type not found")
CHECK_FIELDS_EMPTY = ArgenError("empty required field declaration")
CHECK_FIELDS_MANY_DECL = ArgenError("few declarations of fields not supported")
CHECK_FIELDS_ORDER_DECL = ArgenError("incorrect order of fields")


@dataclass(eq=False)
class ErrCheckPackageDecl(DeclarationError):
    """Invalid package declaration."""

    pkg: str = ""
    backend: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrCheckPackageNamespaceDecl(DeclarationError):
    """Invalid namespace declaration."""

    pkg: str = ""
    name: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrCheckPackageLinkedDecl(DeclarationError):
    """Invalid declaration of a linked entity."""

    pkg: str = ""
    object: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrCheckPackageFieldDecl(DeclarationError):
    """Invalid field declaration."""

    pkg: str = ""
    field: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrCheckPackageFieldMutatorDecl(DeclarationError):
    """Invalid mutator declaration of a field."""

    pkg: str = ""
    field: str = ""
    mutator: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrCheckPackageIndexDecl(DeclarationError):
    """Invalid index declaration."""

    pkg: str = ""
    index: str = ""
    err: Any = None


# --- generator -----------------------------------------------------------

GENERATOR_BACKEND_UNKNOWN = ArgenError("backend unknown")
GENERATOR_BACKEND_NOT_IMPLEMENTED = ArgenError("backend not implemented")
GENERATOR_GET_TMPL_LINE = ArgenError("can't get error lines")
GENERATOR_EMPTY_TMPL_LINE = ArgenError("tmpl lines not set")
GENERATOR_ERROR_LINE_NOT_FOUND = ArgenError("template lines not found in error")


@dataclass(eq=False)
class ErrGeneratorPkg(DeclarationError):
    """Failure while generating a package."""

    name: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrGeneratorFile(DeclarationError):
    """Failure while producing or writing a generated file."""

    name: str = ""
    filename: str = ""
    backend: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrGeneratorPhases(DeclarationError):
    """Failure in one phase of template processing."""

    name: str = ""
    backend: str = ""
    phase: str = ""
    tmpl_lines: str = ""
    err: Any = None


# --- parser --------------------------------------------------------------

TYPE_NOT_BOOL = ArgenError("type not bool")
TYPE_NOT_SLICE = ArgenError("type not slice")
UNKNOWN = ArgenError("unknown entity")
REDEFINED = ArgenError("entity redefined")
NAME_DECLARATION = ArgenError("error name declaration")
INVALID_PARAMS = ArgenError("invalid params")
DUPLICATE = ArgenError("duplicate")
FIELD_NOT_EXIST = ArgenError("field not exists")
INDEX_NOT_EXIST = ArgenError("index not exists")
PARSE_NODE_NAME_UNKNOWN = ArgenError("unknown node name")
PARSE_NODE_NAME_INVALID = ArgenError("invalid struct name")
PARSE_FUNC_DECL_NOT_SUPPORTED = ArgenError("func declaration not implemented")
PROC_FIELD_DUPLICATE_ORDER_INDEX = ArgenError("field order index is duplicate")

PARSE_CONST = ArgenError("constant declaration not implemented")
PARSE_VAR = ArgenError("variable declaration not implemented")
PARSE_CAST_IMPORT_TYPE = ArgenError("error cast type to TypeImport")
PARSE_CAST_SPEC_TYPE = ArgenError("error cast type to TypeSpec")
GET_IMPORT_NAME = ArgenError("error get import name")
IMPORT_DECLARATION = ArgenError("import name declaration invalid")
PARSE_TAG_SPLIT_ABSENT = ArgenError("tag is absent")
PARSE_TAG_SPLIT_EMPTY = ArgenError("tag is empty")
PARSE_TAG_INVALID_FORMAT = ArgenError("invalid tag format")
PARSE_TAG_VALUE_INVALID = ArgenError("invalid value format")
PARSE_TAG_UNKNOWN = ArgenError("unknown tag")
PARSE_TAG_NO_VALUE = ArgenError("tag value required")
PARSE_TAG_WITH_VALUE = ArgenError("wrong tag. Flag can't has value")

PARSE_DOC_EMPTY_BOX_DECLARATION = ArgenError("empty declaration box params in doc")
PARSE_DOC_TIMEOUT_DECL = ArgenError("invalid timeout declaration")
PARSE_DOC_NAMESPACE_DECL = ArgenError("invalid namespace declaration")

PARSE_FIELD_ARRAY_OF_NOT_BYTE = ArgenError("support only array of byte")
PARSE_PROC_FIELD_ARRAY_SLICE = ArgenError("support array|slice of byte|string")
PARSE_FIELD_ARRAY_NOT_SLICE = ArgenError("only array of byte not a slice")
PARSE_FIELD_BINARY = ArgenError("binary format not implemented")
PARSE_FIELD_MUTATOR_INVALID = ArgenError("invalid mutator")
PARSE_FIELD_SIZE_INVALID = ArgenError("error parse size")
PARSE_FIELD_NAME_INVALID = ArgenError("invalid declaration name")
PARSE_FIELD_MUTATOR_TYPE_HAS_NOT_SERIALIZER = ArgenError("mutator type must have serializer")

PARSE_IMPORT_NOT_FOUND = ArgenError("import not found")

PARSE_INDEX_INVALID_TYPE = ArgenError("invalid type of index")
PARSE_INDEX_FIELDNUM_REQUIRED = ArgenError("fieldnum required and must be more than 0")
PARSE_INDEX_FIELDNUM_TOO_BIG = ArgenError("fieldnum greater than fields")
PARSE_INDEX_FIELDNUM_EQUAL = ArgenError("fieldnum equivalent with fields. duplicate index")

PARSE_SERIALIZER_ADD_INTERNAL_IMPORT = ArgenError("error add internal serializer to import")
PARSE_STRUCTURE_EMPTY = ArgenError("empty structure")
PARSE_TRIGGER_PACKAGE_NOT_DEFINED = ArgenError("package not defined")


@dataclass(eq=False)
class ErrParseGenDecl(DeclarationError):
    """Parse failure of a declaration."""

    name: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseGenTypeDecl(DeclarationError):
    """Parse failure of a type declaration."""

    name: str = ""
    type: Any = _type_field()
    err: Any = None


@dataclass(eq=False)
class ErrParseDocDecl(DeclarationError):
    """Parse failure of a documentation comment."""

    name: str = ""
    value: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseTypeFieldStructDecl(DeclarationError):
    """Parse failure of a structure field."""

    name: str = ""
    field_type: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseTagDecl(DeclarationError):
    """Parse failure of a tag."""

    name: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseTypeFieldObjectTagDecl(DeclarationError):
    """Parse failure of a linked-entity tag."""

    name: str = ""
    tag_name: str = ""
    tag_value: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseTypeFieldDecl(DeclarationError):
    """Parse failure of an entity field."""

    name: str = ""
    field_type: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseTypeFieldTagDecl(DeclarationError):
    """Parse failure of an entity field tag."""

    name: str = ""
    tag_name: str = ""
    tag_value: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseFlagTagDecl(DeclarationError):
    """Parse failure of a field flag tag."""

    name: str = ""
    tag_name: str = ""
    tag_value: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseFlagDecl(DeclarationError):
    """Parse failure of a flag."""

    name: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseImportDecl(DeclarationError):
    """Parse failure of an import."""

    path: str = ""
    name: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseTypeIndexDecl(DeclarationError):
    """Parse failure of an index."""

    index_type: str = ""
    name: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseTypeIndexTagDecl(DeclarationError):
    """Parse failure of an index tag."""

    index_type: str = ""
    name: str = ""
    tag_name: str = ""
    tag_value: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseSerializerDecl(DeclarationError):
    """Parse failure of a serializer."""

    name: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseMutatorDecl(DeclarationError):
    """Parse failure of a mutator."""

    name: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseSerializerTagDecl(DeclarationError):
    """Parse failure of a serializer tag."""

    name: str = ""
    tag_name: str = ""
    tag_value: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseMutatorTagDecl(DeclarationError):
    """Parse failure of a mutator tag."""

    name: str = ""
    tag_name: str = ""
    tag_value: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseSerializerTypeDecl(DeclarationError):
    """Parse failure of a serializer type."""

    name: str = ""
    serializer_type: Any = _type_field()
    err: Any = None


@dataclass(eq=False)
class ErrParseTypeStructDecl(DeclarationError):
    """Parse failure of a structure."""

    name: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseTriggerTagDecl(DeclarationError):
    """Parse failure of a trigger tag."""

    name: str = ""
    tag_name: str = ""
    tag_value: str = ""
    err: Any = None


@dataclass(eq=False)
class ErrParseTriggerDecl(DeclarationError):
    """Parse failure of a trigger."""

    name: str = ""
    err: Any = None