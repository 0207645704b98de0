"""Packing parameters of octopus formats and helpers for generator errors."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from argen import errors
from argen.ds import (
    AND_MUTATOR,
    CLEAR_BIT_MUTATOR,
    DEC_MUTATOR,
    INC_MUTATOR,
    OR_MUTATOR,
    SET_BIT_MUTATOR,
    XOR_MUTATOR,
    FieldDeclaration,
)
from argen.errors import ArgenError
from argen.formats import NUMERIC_FORMATS, UNSIGNED_FORMATS, Format

TEMPLATE_NAME = "ARPkgTemplate"

DISCLAIMER = """// Code generated by argen. DO NOT EDIT.
// This code was generated from a template.
//
// Manual changes to this file may cause unexpected behavior in your application.
// Manual changes to this file will be overwritten if the code is regenerated.
//
// Generate info: {{ .AppInfo }}
"""


@dataclass
class GenerateFile:
    """One generated file: its content, name, directory and backend."""

    data: bytes = b""
    name: str = ""
    dir: str = ""
    backend: str = ""


@dataclass(frozen=True)
class FormatParam:
    """How values of one format are packed, unpacked and converted."""

    name: str
    pack_name: str = ""
    unpack_name: str = ""
    pack_conv: str = ""
    unpack_conv: str = ""
    unpack_type_name: str = ""
    min_name: str = ""
    max_name: str = ""
    convstr: str = ""

    def pack_conv_func(self, fieldname: str) -> str:
        """Expression converting ``fieldname`` before packing."""
        if self.pack_conv:
            return f"{self.pack_conv}({fieldname})"
        return fieldname

    def unpack_func(self) -> str:
        """Name of the unpacking function."""
        return self.unpack_name or "iproto.Unpack" + self.name

    def pack_func(self) -> str:
        """Name of the packing function."""
        return self.pack_name or "iproto.Pack" + self.name

    def default_value(self) -> str:
        """Expression packing the zero value of the format."""
        fname = self.pack_func()
        if self.name.startswith("Uint"):
            return fname + "([]byte{}, 0, iproto.ModeDefault)"
        if self.name.startswith("String"):
            return fname + '([]byte{}, "", iproto.ModeDefault)'
        return "can't detect type"

    def unpack_type(self) -> str:
        """Type values are unpacked into, when it differs from the field type."""
        return self.unpack_type_name or self.pack_conv

    def min_value(self) -> str:
        """Expression of the smallest value of the format."""
        return self.min_name or "math.Min" + self.name

    def max_value(self) -> str:
        """Expression of the largest value of the format."""
        return self.max_name or "math.Max" + self.name

    def to_string(self) -> list[str]:
        """The string conversion split around the value placeholder."""
        return self.convstr.split("%%", 1)

    def mutator_type_conv(self) -> str:
        """Conversion applied to mutator arguments."""
        return self.unpack_conv or self.name.capitalize()


@dataclass(frozen=True)
class MutatorParam:
    """A built-in mutator and the formats it applies to."""

    name: str
    available_types: frozenset = frozenset()
    arg_type: str = ""


FORMAT_PARAMS: dict[Format, FormatParam] = {
    Format.BOOL: FormatParam(
        name="Uint8",
        convstr="strconv.FormatBool(%%)",
        pack_conv="octopus.BoolToUint",
        unpack_conv="octopus.UintToBool",
        unpack_type_name="uint8",
    ),
    Format.UINT8: FormatParam(name="Uint8", convstr="strconv.FormatUint(uint64(%%), 10)"),
    Format.UINT16: FormatParam(name="Uint16", convstr="strconv.FormatUint(uint64(%%), 10)"),
    Format.UINT32: FormatParam(name="Uint32", convstr="strconv.FormatUint(uint64(%%), 10)"),
    Format.UINT64: FormatParam(name="Uint64", convstr="strconv.FormatUint(%%, 10)"),
    Format.UINT: FormatParam(
        name="Uint32",
        convstr="strconv.FormatUint(uint64(%%), 10)",
        pack_conv="uint32",
        unpack_conv="uint",
    ),
    Format.INT8: FormatParam(
        name="Uint8",
        convstr="strconv.FormatInt(int64(%%), 10)",
        pack_conv="uint8",
        unpack_conv="int8",
        min_name="math.MinInt8",
        max_name="math.MaxInt8",
    ),
    Format.INT16: FormatParam(
        name="Uint16",
        convstr="strconv.FormatInt(int64(%%), 10)",
        pack_conv="uint16",
        unpack_conv="int16",
        min_name="math.MinInt16",
        max_name="math.MaxInt16",
    ),
    Format.INT32: FormatParam(
        name="Uint32",
        convstr="strconv.FormatInt(int64(%%), 10)",
        pack_conv="uint32",
        unpack_conv="int32",
        min_name="math.MinInt32",
        max_name="math.MaxInt32",
    ),
    Format.INT64: FormatParam(
        name="Uint64",
        convstr="strconv.FormatInt(%%, 10)",
        pack_conv="uint64",
        unpack_conv="int64",
        min_name="math.MinInt64",
        max_name="math.MaxInt64",
    ),
    Format.INT: FormatParam(
        name="Uint32",
        convstr="strconv.FormatInt(int64(%%), 10)",
        pack_conv="uint32",
        unpack_conv="int",
        min_name="math.MinInt32",
        max_name="math.MaxInt32",
    ),
    Format.FLOAT32: FormatParam(
        name="Uint32",
        convstr="strconv.FormatFloat(%%, 32)",
        pack_conv="math.Float32bits",
        unpack_conv="math.Float32frombits",
        unpack_type_name="uint32",
        min_name="math.MinFloat32",
        max_name="math.MaxFloat32",
    ),
    Format.FLOAT64: FormatParam(
        name="Uint64",
        convstr="strconv.FormatFloat(%%, 64)",
        pack_conv="math.Float64bits",
        unpack_conv="math.Float64frombits",
        unpack_type_name="uint64",
        min_name="math.MinFloat64",
        max_name="math.MaxFloat64",
    ),
    Format.STRING: FormatParam(
        name="String",
        convstr=" %% ",
        pack_name="octopus.PackString",
        unpack_name="octopus.UnpackString",
        min_name="0",
        max_name="4096",
        unpack_type_name="string",
    ),
}

MUTATOR_PARAMS: dict[str, MutatorParam] = {
    INC_MUTATOR: MutatorParam(name="Inc", available_types=NUMERIC_FORMATS),
    DEC_MUTATOR: MutatorParam(name="Dec", available_types=NUMERIC_FORMATS),
    AND_MUTATOR: MutatorParam(name="And", available_types=UNSIGNED_FORMATS),
    OR_MUTATOR: MutatorParam(name="Or", available_types=UNSIGNED_FORMATS),
    XOR_MUTATOR: MutatorParam(name="Xor", available_types=UNSIGNED_FORMATS),
    CLEAR_BIT_MUTATOR: MutatorParam(name="ClearBit", available_types=UNSIGNED_FORMATS),
    SET_BIT_MUTATOR: MutatorParam(name="SetBit", available_types=UNSIGNED_FORMATS),
}


def packer_param(fmt: Any) -> FormatParam:
    """Packing parameters of a format."""
    param = FORMAT_PARAMS.get(fmt)
    if param is None:
        raise ArgenError(f"packer for type `{fmt}` not found")
    return param


def mutator_param(mutator: str, fmt: Any) -> MutatorParam:
    """Parameters of a built-in mutator applied to a field of the given format."""
    param = MUTATOR_PARAMS.get(mutator)
    if param is None:
        raise ArgenError(f"mutator packer for type `{fmt}` not found")
    if fmt not in param.available_types:
        raise ArgenError(f"Mutator `{mutator}` not available for type `{fmt}`")
    return param


def needed_imports(fields: Iterable[FieldDeclaration]) -> list[str]:
    """Standard packages the generated code of these fields needs."""
    need_math = False
    need_strconv = False

    for fld in fields:
        if fld.format in (Format.FLOAT32, Format.FLOAT64):
            need_math = True
        if fld.mutators and fld.format not in (Format.UINT32, Format.UINT64, Format.UINT):
            need_math = True
        if fld.primary_key and fld.format != Format.STRING:
            need_strconv = True

    imports = []
    if need_math:
        imports.append("math")
    if need_strconv:
        imports.append("strconv")
    return imports


_TMPL_ERR_RX = re.compile(re.escape(TEMPLATE_NAME) + r":(\d+):")
_CONTEXT_LINES = 3
_INT64_MAX = 2**63 - 1


def tmpl_error_line(lines: Sequence[str], tmpl_error: str) -> str:
    """Template lines leading up to the line a template error points at.

    The line named in the error is marked with an arrow.
    """
    match = _TMPL_ERR_RX.search(tmpl_error)
    if match is None:
        raise errors.GENERATOR_ERROR_LINE_NOT_FOUND

    line_num = int(match.group(1))
    if line_num > _INT64_MAX:
        raise errors.GENERATOR_GET_TMPL_LINE
    if not lines:
        raise errors.GENERATOR_EMPTY_TMPL_LINE

    start = max(line_num - _CONTEXT_LINES - 1, 0)
    marked = [
        ("-->> " if num == _CONTEXT_LINES else "     ") + line
        for num, line in enumerate(lines[start:line_num])
    ]
    return "\n" + "".join(marked)


_IMPORTS_ERR_RX = re.compile(r"^(\d+):(\d+):")


def _wrap(err: BaseException, message: str) -> ArgenError:
    wrapped = ArgenError(f"{message}: {err}")
    wrapped.__cause__ = err
    return wrapped


def error_line(err: BaseException, gen_data: str) -> ArgenError:
    """Wrap a ``line:col:`` error on generated code with the code around it."""
    match = _IMPORTS_ERR_RX.match(str(err))
    if match is None:
        return _wrap(err, "cant parse error message")

    line_num = int(match.group(1))
    lines = gen_data.split("\n")
    if line_num < 1 or len(lines) < line_num:
        return _wrap(err, f"line num {line_num} not found (total {len(lines)})")

    line = lines[line_num - 1]
    byte_num = int(match.group(2))
    if len(line.encode()) < byte_num:
        return _wrap(err, "byte num not found in line: " + line)

    prev_line = lines[line_num - 2] if line_num >= 2 else ""
    next_line = lines[line_num] if line_num < len(lines) else ""
    context = (
        "\n"
        + prev_line.strip("\t")
        + "\n"
        + line.strip("\t")
        + "\n"
        + " " * max(byte_num - 1, 0)
        + "^^^^^"
        + "\n"
        + next_line.strip("\t")
    )
    return _wrap(err, context)