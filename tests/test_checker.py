import pytest

from argen import errors
from argen.checker import (
    Checker,
    check,
    check_backend,
    check_fields,
    check_linked_object,
    check_namespace,
    check_octopus,
)
from argen.ds import (
    FieldDeclaration,
    FieldObject,
    IndexDeclaration,
    MutatorDeclaration,
    NamespaceDeclaration,
    PartialFieldDeclaration,
    ProcFieldDeclaration,
    ProcFieldDeclarations,
    ProcParameterType,
    RecordPackage,
    SerializerDeclaration,
    ServerDeclaration,
)
from argen.errors import (
    ArgenError,
    ErrCheckPackageDecl,
    ErrCheckPackageFieldDecl,
    ErrCheckPackageFieldMutatorDecl,
    ErrCheckPackageIndexDecl,
    ErrCheckPackageLinkedDecl,
    ErrCheckPackageNamespaceDecl,
    ErrParseTypeFieldStructDecl,
)
from argen.formats import Format


def make_foo():
    rp = RecordPackage(
        backends=["octopus"],
        namespace=NamespaceDeclaration(object_name="0", package_name="foo", public_name="Foo"),
        server=ServerDeclaration(host="127.0.0.1", port="11011"),
    )
    rp.add_field(FieldDeclaration(name="ID", format=Format.INT, primary_key=True))
    rp.add_field(FieldDeclaration(name="BarID", format=Format.INT, object_link="Bar"))
    rp.add_field_object(
        FieldObject(name="Foo", key="ID", object_name="bar", field="BarID", unique=True)
    )
    return rp


def make_invalid_format(object_name="0", conf=""):
    rp = RecordPackage(
        backends=["octopus"],
        namespace=NamespaceDeclaration(
            object_name=object_name, package_name="invform", public_name="InvalidFormat"
        ),
        server=ServerDeclaration(host="127.0.0.1", port="11011", conf=conf),
    )
    rp.add_field(FieldDeclaration(name="ID", format="byte", primary_key=True))
    return rp


def octopus_pkg(**server):
    rp = RecordPackage(
        backends=["octopus"],
        namespace=NamespaceDeclaration(object_name="1", package_name="foo", public_name="Foo"),
        server=ServerDeclaration(**server),
    )
    rp.add_field(FieldDeclaration(name="ID", format="int", primary_key=True))
    return rp


# --- check -----------------------------------------------------------------


def test_check_linked_objs_pass_and_missing_link_fails():
    rp = make_foo()
    check({}, {})
    check({"foo": rp}, {"bar": "bar"})
    with pytest.raises(ErrCheckPackageLinkedDecl) as exc:
        check({"foo": rp}, {})
    assert exc.value.object == "bar"


def test_check_wrong_octopus_format():
    with pytest.raises(ErrCheckPackageFieldDecl) as exc:
        check({"invalid": make_invalid_format()}, {})
    assert exc.value.err is errors.CHECK_FIELD_INVALID_FORMAT


def test_check_wrong_octopus_namespace_objectname_format():
    with pytest.raises(ArgenError):
        check({"invalid": make_invalid_format(object_name="invalid", conf="box")}, {})


def test_check_unknown_backend():
    rp = make_foo()
    rp.backends = ["postgres"]
    with pytest.raises(ErrCheckPackageDecl) as exc:
        check({"foo": rp}, {"bar": "bar"})
    assert exc.value.err is errors.CHECK_BACKEND_UNKNOWN
    assert exc.value.backend == "postgres"


def test_checker_init_holds_files():
    assert Checker({}).files == {}
    rp = make_foo()
    assert Checker({"foo": rp}).files["foo"] is rp


# --- check_backend -----------------------------------------------------------


def test_check_backend_one_backend_passes_others_fail():
    check_backend(RecordPackage(backends=["octopus"]))
    with pytest.raises(ErrCheckPackageDecl) as exc:
        check_backend(RecordPackage())
    assert exc.value.err is errors.CHECK_BACKEND_EMPTY


def test_check_backend_many():
    with pytest.raises(ErrCheckPackageDecl) as exc:
        check_backend(RecordPackage(backends=["octopus", "postgres"]))
    assert exc.value.err is errors.CHECK_PKG_BACKEND_TO_MATCH


# --- check_linked_object ---------------------------------------------------


def test_check_linked_object_cases():
    check_linked_object(RecordPackage(), {})
    linked = RecordPackage()
    linked.add_field_object(FieldObject(name="Foo", key="ID", object_name="bar", field="barID"))
    check_linked_object(linked, {"bar": "bar"})
    with pytest.raises(ErrCheckPackageLinkedDecl) as exc:
        check_linked_object(linked, {})
    assert exc.value.err is errors.CHECK_OBJECT_NOT_FOUND


# --- check_namespace -------------------------------------------------------


@pytest.mark.parametrize(
    "ns",
    [
        NamespaceDeclaration(object_name="0", public_name="", package_name="foo"),
        NamespaceDeclaration(object_name="0", public_name="Foo", package_name=""),
    ],
)
def test_check_namespace_empty(ns):
    with pytest.raises(ErrCheckPackageNamespaceDecl) as exc:
        check_namespace(ns)
    assert exc.value.err is errors.CHECK_EMPTY_NAMESPACE


def test_check_namespace_normal_and_error_fields():
    check_namespace(NamespaceDeclaration(object_name="0", public_name="Foo", package_name="foo"))
    with pytest.raises(ErrCheckPackageNamespaceDecl) as exc:
        check_namespace(NamespaceDeclaration(public_name="Foo"))
    assert exc.value.name == "Foo"


# --- check_fields ----------------------------------------------------------


FIELD_ERROR_CASES = {
    "empty fields": RecordPackage(fields=[]),
    "empty format": RecordPackage(fields=[FieldDeclaration(name="Foo")]),
    "invalid format": RecordPackage(fields=[FieldDeclaration(name="Foo", format="[]int")]),
    "no primary": RecordPackage(fields=[FieldDeclaration(name="Foo", format="int")]),
    "fields conflict with links": RecordPackage(
        fields=[FieldDeclaration(name="Foo", format="int", primary_key=True)],
        fields_object_map={"Foo": FieldObject()},
    ),
    "mutators and primary": RecordPackage(
        fields=[FieldDeclaration(name="Foo", format="int", primary_key=True, mutators=["fmut"])]
    ),
    "serializer not declared": RecordPackage(
        fields=[
            FieldDeclaration(name="Foo", format="int", primary_key=True),
            FieldDeclaration(name="Foo", format="int", mutators=["fmut"], serializer=["fser"]),
        ],
        serializer_map={},
    ),
    "mutators and links": RecordPackage(
        fields=[
            FieldDeclaration(name="Foo", format="int", primary_key=True),
            FieldDeclaration(name="Foo", format="int", mutators=["fmut"], object_link="Bar"),
        ]
    ),
    "serializer and links": RecordPackage(
        fields=[
            FieldDeclaration(name="Foo", format="int", primary_key=True),
            FieldDeclaration(name="Foo", format="int", serializer=["fser"], object_link="Bar"),
        ],
        serializer_map={"fser": SerializerDeclaration()},
    ),
    "custom mutator without serializer": RecordPackage(
        fields=[
            FieldDeclaration(name="Pk", format="int", primary_key=True),
            FieldDeclaration(name="Foo", format="string", mutators=["cmut"]),
        ],
        mutator_map={
            "cmut": MutatorDeclaration(
                name="cmut", type="pkg.Bar", partial_fields=[PartialFieldDeclaration()]
            )
        },
    ),
    "few custom mutator on field": RecordPackage(
        fields=[
            FieldDeclaration(name="Pk", format="int", primary_key=True),
            FieldDeclaration(name="Foo", format="string", mutators=["dec", "cmut", "cmut2"]),
        ],
        mutator_map={
            "cmut": MutatorDeclaration(name="cmut", type="string"),
            "cmut2": MutatorDeclaration(name="cmut2", type="string"),
        },
    ),
}


@pytest.mark.parametrize("name", sorted(FIELD_ERROR_CASES))
def test_check_fields_errors(name):
    with pytest.raises(ArgenError):
        check_fields(FIELD_ERROR_CASES[name])


def test_check_fields_specific_errors():
    with pytest.raises(ErrCheckPackageDecl) as exc:
        check_fields(FIELD_ERROR_CASES["empty fields"])
    assert exc.value.err is errors.CHECK_FIELDS_EMPTY
    with pytest.raises(ErrCheckPackageIndexDecl) as exc:
        check_fields(FIELD_ERROR_CASES["no primary"])
    assert exc.value.index == "primary"
    with pytest.raises(ErrParseTypeFieldStructDecl):
        check_fields(FIELD_ERROR_CASES["fields conflict with links"])
    with pytest.raises(ErrCheckPackageFieldMutatorDecl) as exc:
        check_fields(FIELD_ERROR_CASES["few custom mutator on field"])
    assert exc.value.mutator == "cmut2"


def test_check_fields_normal_field_and_builtin_mutator():
    check_fields(RecordPackage(fields=[FieldDeclaration(name="Foo", format="int", primary_key=True)]))
    rp = RecordPackage(
        fields=[
            FieldDeclaration(name="Pk", format="int", primary_key=True),
            FieldDeclaration(name="Cnt", format="uint32", mutators=["inc"]),
        ]
    )
    check_fields(rp)
    rp.fields[1].primary_key = True
    with pytest.raises(ErrCheckPackageFieldMutatorDecl) as exc:
        check_fields(rp)
    assert exc.value.err is errors.CHECK_FIELD_MUTATOR_CONFLICT_PK


# --- check_fields for procedures -------------------------------------------


def out_fields(mapping):
    return ProcFieldDeclarations(mapping)


PROC_ERROR_CASES = {
    "empty fields": RecordPackage(proc_out_fields=out_fields({})),
    "2 fields declaration": RecordPackage(
        fields=[FieldDeclaration(name="Foo", format="int", primary_key=True)],
        proc_out_fields=out_fields(
            {0: ProcFieldDeclaration(name="Foo", format="int", type=ProcParameterType.INOUT)}
        ),
    ),
    "empty format": RecordPackage(
        proc_out_fields=out_fields({0: ProcFieldDeclaration(name="Foo", type=ProcParameterType.OUT)})
    ),
    "invalid input format": RecordPackage(
        proc_out_fields=out_fields(
            {0: ProcFieldDeclaration(name="Foo", format="int", type=ProcParameterType.OUT)}
        ),
        proc_in_fields=[ProcFieldDeclaration(name="Foo", format="[]int", type=ProcParameterType.IN)],
    ),
    "invalid output format": RecordPackage(
        proc_out_fields=out_fields(
            {0: ProcFieldDeclaration(name="Foo", format="[]int", type=ProcParameterType.OUT)}
        )
    ),
    "type not found": RecordPackage(
        proc_out_fields=out_fields({0: ProcFieldDeclaration(name="Foo", format="int")})
    ),
    "incorrect fields order": RecordPackage(
        proc_out_fields=out_fields(
            {
                0: ProcFieldDeclaration(name="Foo", format="int"),
                2: ProcFieldDeclaration(name="Bar", format="int"),
            }
        )
    ),
    "serializer not declared": RecordPackage(
        proc_out_fields=out_fields(
            {
                0: ProcFieldDeclaration(name="Foo", format="int", type=ProcParameterType.OUT),
                1: ProcFieldDeclaration(
                    name="Foo", format="int", type=ProcParameterType.OUT, serializer=["fser"]
                ),
            }
        )
    ),
}


@pytest.mark.parametrize("name", sorted(PROC_ERROR_CASES))
def test_check_proc_fields_errors(name):
    with pytest.raises(ArgenError):
        check_fields(PROC_ERROR_CASES[name])


def test_check_proc_fields_specific_errors():
    with pytest.raises(ErrCheckPackageDecl) as exc:
        check_fields(PROC_ERROR_CASES["incorrect fields order"])
    assert exc.value.err is errors.CHECK_FIELDS_ORDER_DECL
    with pytest.raises(ErrCheckPackageDecl) as exc:
        check_fields(PROC_ERROR_CASES["2 fields declaration"])
    assert exc.value.err is errors.CHECK_FIELDS_MANY_DECL
    with pytest.raises(ErrCheckPackageFieldDecl) as exc:
        check_fields(PROC_ERROR_CASES["type not found"])
    assert exc.value.err is errors.CHECK_FIELD_TYPE_NOT_FOUND


def test_check_proc_fields_normal():
    rp = RecordPackage(
        proc_out_fields=out_fields(
            {0: ProcFieldDeclaration(name="Foo", format="int", type=ProcParameterType.OUT)}
        )
    )
    check_fields(rp)
    rp.proc_in_fields.append(
        ProcFieldDeclaration(name="Foo", format="[]string", type=ProcParameterType.IN)
    )
    check_fields(rp)
    rp.proc_in_fields.append(ProcFieldDeclaration(name="Bad", format="[]int", type=ProcParameterType.IN))
    with pytest.raises(ErrCheckPackageFieldDecl) as exc:
        check_fields(rp)
    assert exc.value.field == "Bad"


# --- check_octopus ---------------------------------------------------------


def test_check_octopus_server_rules():
    check_octopus(octopus_pkg(host="127.0.0.1", port="11011"))
    check_octopus(octopus_pkg(conf="box"))
    with pytest.raises(ErrCheckPackageDecl) as exc:
        check_octopus(octopus_pkg())
    assert exc.value.err is errors.CHECK_SERVER_EMPTY


def test_check_octopus_port_without_host():
    with pytest.raises(ErrCheckPackageDecl) as exc:
        check_octopus(octopus_pkg(conf="box", port="11011"))
    assert exc.value.err is errors.CHECK_PORT_EMPTY


def test_check_octopus_host_and_conf_conflict():
    with pytest.raises(ErrCheckPackageDecl) as exc:
        check_octopus(octopus_pkg(host="127.0.0.1", conf="box"))
    assert exc.value.err is errors.CHECK_SERVER_CONFLICT


def test_check_octopus_empty_index():
    rp = octopus_pkg(host="127.0.0.1")
    rp.indexes.append(IndexDeclaration(name="Empty"))
    with pytest.raises(ErrCheckPackageIndexDecl) as exc:
        check_octopus(rp)
    assert exc.value.index == "Empty"


@pytest.mark.parametrize("object_name", ["abc", "", "1.5", "99999999999999999999"])
def test_check_octopus_object_name_must_be_int(object_name):
    rp = octopus_pkg(host="127.0.0.1")
    rp.namespace.object_name = object_name
    with pytest.raises(ErrCheckPackageNamespaceDecl) as exc:
        check_octopus(rp)
    assert exc.value.name == object_name


def test_check_octopus_proc_in_fields():
    rp = RecordPackage(server=ServerDeclaration(host="127.0.0.1"))
    rp.proc_in_fields.append(ProcFieldDeclaration(name="In", format="string", type=ProcParameterType.IN))
    check_octopus(rp)
    rp.proc_in_fields.append(
        ProcFieldDeclaration(name="Arr", format="[]string", type=ProcParameterType.IN)
    )
    with pytest.raises(ErrCheckPackageFieldDecl) as exc:
        check_octopus(rp)
    assert exc.value.err is errors.CHECK_FIELD_SERIALIZER_NOT_FOUND


def test_check_octopus_proc_in_invalid_format():
    rp = RecordPackage(server=ServerDeclaration(host="127.0.0.1"))
    rp.proc_in_fields.append(ProcFieldDeclaration(name="In", format="int", type=ProcParameterType.IN))
    with pytest.raises(ErrCheckPackageFieldDecl) as exc:
        check_octopus(rp)
    assert exc.value.err is errors.CHECK_FIELD_INVALID_FORMAT