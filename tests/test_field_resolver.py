import pytest

from models.csv_model import UNRESOLVED, FieldBinding
from services.field_resolver import STATUS_OS_FIELDS, contains, fold, resolve, starts_with


def test_status_export_header_resolves_in_order():
    header = ["Planta", "N° Documento (O/S)", "X", "Descripción O/S"]

    binding = resolve(header, STATUS_OS_FIELDS)

    assert binding.as_dict() == {"plant": 0, "document": 1, "description": 3}


def test_first_matching_label_wins():
    header = ["Doc interno", "Documento", "Documento 2"]

    binding = resolve(header, {"document": [contains("documento")]})

    assert binding.index("document") == 1


def test_any_predicate_may_match():
    header = ["Centro", "Plant code"]

    binding = resolve(header, {"plant": [starts_with("planta"), contains("plant")]})

    assert binding.index("plant") == 1


@pytest.mark.parametrize(
    "label",
    ["Descripcion O/S", "DESCRIPCIÓN O/S", "  descripción o/s  ", "Descripción"],
)
def test_description_tolerates_case_accents_and_padding(label):
    binding = resolve(["Planta", label], STATUS_OS_FIELDS)

    assert binding.index("description") == 1


def test_degree_sign_variants():
    assert contains("n° doc").matches("Nº Doc. compras")
    assert contains("n° doc").matches("N° DOCUMENTO")


def test_prefix_predicate_is_anchored():
    assert starts_with("planta").matches("Planta ")
    assert not starts_with("planta").matches("Subplanta")
    assert contains("planta").matches("Subplanta")


def test_unresolved_field_is_a_value_not_an_error():
    header = ["Material", "Stock"]

    binding = resolve(header, STATUS_OS_FIELDS)

    assert binding.index("document") is UNRESOLVED
    assert not binding.is_resolved("document")
    assert "document" not in binding
    assert binding.value(("1001", "25"), "document") == ""
    assert binding.label(header, "document", "N° Documento") == "N° Documento"


def test_binding_value_never_raises():
    binding = FieldBinding({"a": 0, "b": 5})

    assert binding.value(("x",), "a") == "x"
    assert binding.value(("x",), "b") == ""
    assert binding.value(("x",), "missing") == ""


def test_binding_is_a_snapshot():
    source = {"a": 0}
    binding = FieldBinding(source)
    source["a"] = 3

    assert binding.index("a") == 0


def test_empty_header_leaves_everything_unresolved():
    binding = resolve([], STATUS_OS_FIELDS)

    assert all(v is UNRESOLVED for v in binding.as_dict().values())


def test_fold():
    assert fold("  Descripción ÓRDEN ") == "descripcion orden"
