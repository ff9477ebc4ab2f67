import pytest
from pydantic import ValidationError

from shopfloor import taxonomy
from shopfloor.errors import InvalidInput, NotFound


def test_every_code_has_known_category():
    for rc in taxonomy.REASON_CODES.values():
        assert rc.category in taxonomy.CATEGORY_LABEL


def test_lookup():
    rc = taxonomy.lookup("MECH_BREAKDOWN")
    assert rc.label == "Mechanical breakdown"
    assert rc.category == "mechanical"


def test_lookup_unknown():
    with pytest.raises(NotFound):
        taxonomy.lookup("NOPE")


def test_codes_by_category_keeps_table_order():
    codes = [rc.code for rc in taxonomy.codes_by_category("electrical")]
    assert codes == ["ELEC_POWER", "ELEC_CONTROLS", "ELEC_SENSOR", "ELEC_MOTOR"]


def test_codes_by_unknown_category():
    with pytest.raises(InvalidInput):
        taxonomy.codes_by_category("cosmic")


def test_resolve_category_ignores_claim():
    assert taxonomy.resolve_category("MECH_JAM", claimed="quality") == "mechanical"


def test_resolve_category_unknown_code():
    with pytest.raises(InvalidInput) as exc:
        taxonomy.resolve_category("NOPE")
    assert exc.value.field == "reason_code"


def test_reason_codes_are_immutable():
    rc = taxonomy.lookup("OTHER")
    with pytest.raises(ValidationError):
        rc.category = "quality"


def test_category_label():
    assert taxonomy.category_label("material") == "Material"
    assert taxonomy.category_label("unknown") == "unknown"
