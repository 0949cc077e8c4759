import pytest

from bitabledb.core.errors import NotFoundError, RemoteError
from bitabledb.core.models import Field, FieldType, Table


def test_field_type_values_match_wire_codes():
    assert int(FieldType.STRING) == 1
    assert int(FieldType.INT) == 2
    assert FieldType.parse("people") is FieldType.PEOPLE


def test_table_rejects_duplicate_field_names():
    with pytest.raises(ValueError, match="Duplicate field names"):
        Table("t", (Field("a"), Field("a", FieldType.INT)))


def test_table_accepts_list_of_fields():
    table = Table("t", [Field("a"), Field("b")])

    assert table.fields == (Field("a"), Field("b"))


def test_error_messages():
    assert str(NotFoundError("shop")) == "database[shop] not exists"
    assert str(NotFoundError("shop", "users")) == "table[shop.users] not exists"
    assert isinstance(NotFoundError("shop"), LookupError)
    assert str(RemoteError("create_record", "bad", 1254001)) == (
        "create_record failed: bad (code: 1254001)"
    )
