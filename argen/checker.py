"""Consistency checks of parsed entity declarations."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from argen import errors
from argen.ds import NamespaceDeclaration, RecordPackage, field_mutators
from argen.errors import (
    ErrCheckPackageDecl,
    ErrCheckPackageFieldDecl,
    ErrCheckPackageFieldMutatorDecl,
    ErrCheckPackageIndexDecl,
    ErrCheckPackageLinkedDecl,
    ErrCheckPackageNamespaceDecl,
    ErrParseTypeFieldStructDecl,
)
from argen.formats import OCTOPUS_PROC_IN_FORMATS, Format, is_field_format, is_proc_format

log = logging.getLogger(__name__)

_INT_RX = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _is_int64(value: str) -> bool:
    if not _INT_RX.fullmatch(value):
        return False
    return _INT64_MIN <= int(value) <= _INT64_MAX


@dataclass
class Checker:
    """The set of parsed entities to be checked."""

    files: dict[str, RecordPackage] = field(default_factory=dict)


def check_backend(cl: RecordPackage) -> None:
    """Exactly one backend must be declared."""
    if not cl.backends:
        raise ErrCheckPackageDecl(pkg=cl.namespace.package_name, err=errors.CHECK_BACKEND_EMPTY)
    if len(cl.backends) > 1:
        raise ErrCheckPackageDecl(
            pkg=cl.namespace.package_name, err=errors.CHECK_PKG_BACKEND_TO_MATCH
        )


def check_linked_object(cl: RecordPackage, linked_objects: Mapping[str, str]) -> None:
    """Every entity referred to by a link must exist."""
    for fobj in cl.fields_object_map.values():
        if fobj.object_name not in linked_objects:
            raise ErrCheckPackageLinkedDecl(
                pkg=cl.namespace.package_name,
                object=fobj.object_name,
                err=errors.CHECK_OBJECT_NOT_FOUND,
            )


def check_namespace(ns: NamespaceDeclaration) -> None:
    """Package and public names must both be set."""
    if not ns.package_name or not ns.public_name:
        raise ErrCheckPackageNamespaceDecl(
            pkg=ns.package_name, name=ns.public_name, err=errors.CHECK_EMPTY_NAMESPACE
        )


def _check_entity_fields(cl: RecordPackage) -> bool:
    pkg = cl.namespace.package_name
    builtin = field_mutators()
    primary_found = False

    for fld in cl.fields:
        if not is_field_format(fld.format):
            raise ErrCheckPackageFieldDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_INVALID_FORMAT
            )

        if fld.serializer and fld.serializer[0] not in cl.serializer_map:
            raise ErrCheckPackageFieldDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_SERIALIZER_NOT_FOUND
            )

        if fld.mutators:
            custom_count = 0
            for mutator in fld.mutators:
                declared = cl.mutator_map.get(mutator)
                if declared is not None:
                    custom_count += 1
                    if custom_count > 1:
                        raise ErrCheckPackageFieldMutatorDecl(
                            pkg=pkg,
                            field=fld.name,
                            mutator=mutator,
                            err=errors.PARSE_FIELD_MUTATOR_INVALID,
                        )
                elif mutator not in builtin:
                    raise ErrCheckPackageFieldMutatorDecl(
                        pkg=pkg,
                        field=fld.name,
                        mutator=mutator,
                        err=errors.PARSE_FIELD_MUTATOR_INVALID,
                    )

                if declared is not None and declared.partial_fields and not fld.serializer:
                    raise ErrCheckPackageFieldMutatorDecl(
                        pkg=pkg,
                        field=fld.name,
                        mutator=mutator,
                        err=errors.PARSE_FIELD_MUTATOR_TYPE_HAS_NOT_SERIALIZER,
                    )

            if fld.primary_key:
                raise ErrCheckPackageFieldMutatorDecl(
                    pkg=pkg,
                    field=fld.name,
                    mutator=fld.mutators[0],
                    err=errors.CHECK_FIELD_MUTATOR_CONFLICT_PK,
                )

            if fld.object_link:
                raise ErrCheckPackageFieldMutatorDecl(
                    pkg=pkg,
                    field=fld.name,
                    mutator=fld.mutators[0],
                    err=errors.CHECK_FIELD_MUTATOR_CONFLICT_OBJECT,
                )

        if fld.serializer and fld.object_link:
            raise ErrCheckPackageFieldMutatorDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_SERIALIZER_CONFLICT_OBJECT
            )

        linked = cl.fields_object_map.get(fld.name)
        if linked is not None:
            raise ErrParseTypeFieldStructDecl(name=linked.name, err=errors.REDEFINED)

        if fld.primary_key:
            primary_found = True

    return primary_found


def _check_proc_fields(cl: RecordPackage) -> None:
    pkg = cl.namespace.package_name

    for fld in cl.proc_out_fields.list():
        if not is_field_format(fld.format):
            raise ErrCheckPackageFieldDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_INVALID_FORMAT
            )
        if fld.serializer and fld.serializer[0] not in cl.serializer_map:
            raise ErrCheckPackageFieldDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_SERIALIZER_NOT_FOUND
            )
        if not fld.type:
            raise ErrCheckPackageFieldDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_TYPE_NOT_FOUND
            )

    for fld in cl.proc_in_fields:
        if not is_proc_format(fld.format):
            raise ErrCheckPackageFieldDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_INVALID_FORMAT
            )
        if fld.serializer and fld.serializer[0] not in cl.serializer_map:
            raise ErrCheckPackageFieldDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_SERIALIZER_NOT_FOUND
            )
        if not fld.type:
            raise ErrCheckPackageFieldDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_TYPE_NOT_FOUND
            )


def check_fields(cl: RecordPackage) -> None:
    """Validate the fields or procedure parameters of an entity.

    Formats must be known, serializers and mutators declared, mutated fields
    may be neither keys nor links, and an entity with fields needs a primary key.
    """
    pkg = cl.namespace.package_name

    if cl.fields and cl.proc_out_fields:
        raise ErrCheckPackageDecl(pkg=pkg, err=errors.CHECK_FIELDS_MANY_DECL)

    if not cl.proc_out_fields.validate():
        raise ErrCheckPackageDecl(pkg=pkg, err=errors.CHECK_FIELDS_ORDER_DECL)

    primary_found = _check_entity_fields(cl)
    _check_proc_fields(cl)

    if not cl.fields and not cl.proc_out_fields:
        raise ErrCheckPackageDecl(pkg=pkg, err=errors.CHECK_FIELDS_EMPTY)

    if cl.fields and not primary_found:
        raise ErrCheckPackageIndexDecl(pkg=pkg, index="primary", err=errors.INDEX_NOT_EXIST)


def check_octopus(cl: RecordPackage) -> None:
    """Checks specific to the octopus backend."""
    pkg = cl.namespace.package_name
    server = cl.server

    if not server.host and not server.conf:
        raise ErrCheckPackageDecl(pkg=pkg, err=errors.CHECK_SERVER_EMPTY)

    if not server.host and server.port:
        raise ErrCheckPackageDecl(pkg=pkg, err=errors.CHECK_PORT_EMPTY)

    if server.host and server.conf:
        raise ErrCheckPackageDecl(pkg=pkg, err=errors.CHECK_SERVER_CONFLICT)

    for fld in cl.fields:
        if fld.format in (Format.STRING, Format.BYTE_ARRAY) and fld.size == 0:
            log.warning(
                "Warn: field `%s` declaration. Field with type string or []byte not contain size.",
                fld.name,
            )

    for ind in cl.indexes:
        if not ind.fields:
            raise ErrCheckPackageIndexDecl(
                pkg=pkg, index=ind.name, err=errors.CHECK_FIELD_INDEX_EMPTY
            )

    if cl.fields and not _is_int64(cl.namespace.object_name):
        raise ErrCheckPackageNamespaceDecl(
            pkg=pkg, name=cl.namespace.object_name, err=errors.CHECK_FIELD_INVALID_FORMAT
        )

    for fld in cl.proc_in_fields:
        if fld.format not in OCTOPUS_PROC_IN_FORMATS:
            raise ErrCheckPackageFieldDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_INVALID_FORMAT
            )
        if fld.format != Format.STRING and not fld.serializer:
            raise ErrCheckPackageFieldDecl(
                pkg=pkg, field=fld.name, err=errors.CHECK_FIELD_SERIALIZER_NOT_FOUND
            )


def check(files: Mapping[str, RecordPackage], linked_objects: Mapping[str, str]) -> None:
    """Check every parsed entity; call only after all declarations are parsed."""
    for cl in files.values():
        check_backend(cl)
        check_namespace(cl.namespace)
        check_linked_object(cl, linked_objects)
        check_fields(cl)

        for backend in cl.backends:
            if backend == "octopus":
                check_octopus(cl)
            else:
                raise ErrCheckPackageDecl(
                    pkg=cl.namespace.package_name,
                    backend=backend,
                    err=errors.CHECK_BACKEND_UNKNOWN,
                )