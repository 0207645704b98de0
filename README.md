# argen

`argen` models declarations of repository entities, checks them for
consistency and prepares the destination directories for generated
repository packages. Each entity is described by its namespace, server,
fields, indexes, links to other entities, serializers, mutators,
triggers and flags. Procedures are described by their input and output
parameters.

It has no runtime dependencies outside the standard library.

## Modules

- `argen.errors` – `ArgenError`, the structured `DeclarationError`
  subclasses (`ErrCheckPackageDecl`, `ErrParseImportDecl`,
  `ErrGeneratorFile`, ...) and `error_base`, which renders them.
- `argen.formats` – the `Format` enum of field formats and the
  predicates `is_field_format` and `is_proc_format`.
- `argen.ds` – the declaration data model, centred on `RecordPackage`.
- `argen.checker` – `check` and the individual checks.
- `argen.generator` – packing parameters of formats, mutator parameters,
  import detection and error-context helpers.
- `argen.app` – `ArGen`, which prepares directories and packages for a
  generation run, and `write_to_file`.

## Describing an entity

`argen.ds.RecordPackage` holds everything known about one entity. Its
`add_*` methods (`add_field`, `add_proc_field`, `add_field_object`,
`add_index`, `add_trigger`, `add_serializer`, `add_flag`, `add_mutator`,
`add_partial_field`) keep the reverse indexes up to date and raise an
error from `argen.errors` when a name is declared twice.

```python
from argen.ds import (
    FieldDeclaration,
    NamespaceDeclaration,
    RecordPackage,
    ServerDeclaration,
)
from argen.formats import Format

foo = RecordPackage()
foo.backends = ["octopus"]
foo.namespace = NamespaceDeclaration(object_name="0", package_name="foo", public_name="Foo")
foo.server = ServerDeclaration(host="127.0.0.1", port="11011")
foo.add_field(FieldDeclaration(name="ID", format=Format.INT, primary_key=True))
```

`add_index` fills in a `SelectBy<Name>` selector for primary and unique
indexes, marks the fields of a primary index as primary keys and numbers
non-partial indexes after the previous one.

Imports needed by generated code are tracked on the same object:

```python
foo.add_import("go/ast")
foo.find_import("go/ast")
foo.find_import_by_pkg("ast")
foo.find_or_add_import("example/model/dictionary", "")
```

`argen.ds.get_import_name` extracts the package name from an import
path, and `argen.ds.field_mutators` returns the built-in mutators
(`inc`, `dec`, `set_bit`, `clear_bit`, `and`, `or`, `xor`).

Procedure output parameters live in a `ProcFieldDeclarations` mapping
keyed by call position; `validate` reports whether no position lies
beyond the number of parameters, and `list` returns them in call order.

## Checking declarations

`argen.checker.check(files, linked_objects)` validates a set of parsed
entities: exactly one backend, a complete namespace, existing linked
entities, valid field formats, declared serializers and mutators, no
mutators on primary keys or links, no serializers on links, a primary
key for entities with fields, well-ordered procedure parameters, and the
octopus-specific server, index and namespace settings.

```python
from argen.checker import check

check({"foo": foo}, {})
```

The first problem found is raised. All errors derive from
`argen.errors.ArgenError`; declaration errors render their fields and
the nested cause as `error_base` does:

```
ErrGeneratorPkg Name: `TestError`; 
	backend unknown
```

## Generation helpers

`argen.generator` maps formats to packing parameters (`packer_param`,
returning a `FormatParam`), validates built-in mutators against formats
(`mutator_param`), works out the extra standard imports a set of fields
needs (`needed_imports`), and shows the offending lines of a template
(`tmpl_error_line`) or of generated code (`error_line`). `GenerateFile`
describes one generated file: its data, name, directory and backend.

## Preparing a generation run

`argen.app.ArGen(app_info, src_dir, dst_dir, fixture_dir, mod_name)`
reads the declaration directory and the destination directory. A
missing destination is created with a `.argen` marker file; an existing
destination without that marker is refused so that unrelated files are
never removed. With an `ArGen` you can:

- register entity packages with `add_record_package` (lower-case latin
  names of at most 20 letters, no duplicates);
- fill in module paths and collect already existing files with
  `prepare_check` and `get_exists`;
- add imports of linked packages and set index types with
  `prepare_generate` and `prepare_fixture_generate`;
- create the fixture data directory and empty store files with
  `prepare_fixtures_storage`;
- write `GenerateFile` objects into place with `save_generate_result`,
  which uses `write_to_file` and drops written paths from
  `file_to_remove`.

## What this package does not do

It does not read declaration source files into `RecordPackage` objects,
and it does not render the generated repository, mock, fixture or meta
code: there are no templates and no code formatter here. It provides no
command-line program; a generation run is driven from your own code
using the pieces above.