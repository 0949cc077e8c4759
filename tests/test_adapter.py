import json
from types import SimpleNamespace

import pytest

from bitabledb.core.adapters.bitable import LarkBitableAdapter
from bitabledb.core.errors import RemoteError
from bitabledb.core.models import RemoteField, RemoteRecord, RemoteTable


def _ok(**data):
    return SimpleNamespace(
        success=lambda: True, code=0, msg="success", data=SimpleNamespace(**data)
    )


def _fail(code=1254043, msg="RecordIdNotFound"):
    return SimpleNamespace(success=lambda: False, code=code, msg=msg, data=None)


class _Endpoint:
    """Replays canned responses and records the requests it received."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(**endpoints):
    """Build a lark.Client-shaped namespace with only the given endpoints."""
    bitable = SimpleNamespace(
        v1=SimpleNamespace(
            app=SimpleNamespace(create=endpoints.get("app_create")),
            app_table=SimpleNamespace(
                list=endpoints.get("table_list"),
                create=endpoints.get("table_create"),
                delete=endpoints.get("table_delete"),
            ),
            app_table_field=SimpleNamespace(
                list=endpoints.get("field_list"),
                create=endpoints.get("field_create"),
                update=endpoints.get("field_update"),
                delete=endpoints.get("field_delete"),
            ),
            app_table_record=SimpleNamespace(
                list=endpoints.get("record_list"),
                create=endpoints.get("record_create"),
                update=endpoints.get("record_update"),
                delete=endpoints.get("record_delete"),
            ),
        )
    )
    drive = SimpleNamespace(v1=SimpleNamespace(file=SimpleNamespace(list=endpoints.get("file_list"))))
    return SimpleNamespace(
        bitable=bitable, drive=drive, request=endpoints.get("raw_request")
    )


def test_root_folder_parses_raw_response():
    payload = {"code": 0, "msg": "success", "data": {"token": "fld_root", "user_id": "ou_1"}}
    raw = _Endpoint(SimpleNamespace(raw=SimpleNamespace(content=json.dumps(payload).encode())))
    adapter = LarkBitableAdapter(_client(raw_request=raw))

    root = adapter.find_or_create_root_folder()

    assert root.token == "fld_root"
    assert root.owner_id == "ou_1"


def test_root_folder_error_code_raises():
    payload = {"code": 99991663, "msg": "tenant token invalid"}
    raw = _Endpoint(SimpleNamespace(raw=SimpleNamespace(content=json.dumps(payload).encode())))
    adapter = LarkBitableAdapter(_client(raw_request=raw))

    with pytest.raises(RemoteError, match="tenant token invalid") as exc_info:
        adapter.find_or_create_root_folder()
    assert exc_info.value.code == 99991663


def test_find_container_by_name_only_matches_bitable_type():
    files = [
        SimpleNamespace(name="shop", type="doc", token="doc_1"),
        SimpleNamespace(name="shop", type="bitable", token="app_1"),
    ]
    endpoint = _Endpoint(_ok(files=files, has_more=False, next_page_token=None))
    adapter = LarkBitableAdapter(_client(file_list=endpoint))

    assert adapter.find_container_by_name("shop", "fld_root") == ("app_1", True)


def test_find_container_by_name_follows_pages_and_misses():
    endpoint = _Endpoint(
        _ok(files=[SimpleNamespace(name="a", type="bitable", token="x")], has_more=True, next_page_token="p2"),
        _ok(files=None, has_more=False, next_page_token=None),
    )
    adapter = LarkBitableAdapter(_client(file_list=endpoint))

    assert adapter.find_container_by_name("shop", "fld_root") == ("", False)
    assert len(endpoint.requests) == 2


def test_create_container_returns_app_token():
    endpoint = _Endpoint(_ok(app=SimpleNamespace(app_token="app_new")))
    adapter = LarkBitableAdapter(_client(app_create=endpoint))

    assert adapter.create_container("shop", "fld_root") == "app_new"


def test_list_fields_paginates():
    endpoint = _Endpoint(
        _ok(
            items=[SimpleNamespace(field_id="f1", field_name="id", type=1)],
            has_more=True,
            page_token="p2",
        ),
        _ok(
            items=[SimpleNamespace(field_id="f2", field_name="age", type=2)],
            has_more=False,
            page_token=None,
        ),
    )
    adapter = LarkBitableAdapter(_client(field_list=endpoint))

    assert adapter.list_fields("app1", "tbl1") == [
        RemoteField(id="f1", name="id", type=1),
        RemoteField(id="f2", name="age", type=2),
    ]
    assert len(endpoint.requests) == 2


def test_create_field_and_table_return_ids():
    adapter = LarkBitableAdapter(
        _client(
            field_create=_Endpoint(_ok(field=SimpleNamespace(field_id="fld9"))),
            table_create=_Endpoint(_ok(table_id="tbl9")),
        )
    )

    assert adapter.create_field("app1", "tbl1", "age", 2) == "fld9"
    assert adapter.create_table("app1", "users") == "tbl9"


def test_list_tables_handles_empty_items():
    adapter = LarkBitableAdapter(
        _client(table_list=_Endpoint(_ok(items=None, has_more=False, page_token=None)))
    )

    assert adapter.list_tables("app1") == []


def test_list_tables_maps_items():
    items = [SimpleNamespace(table_id="tbl1", name="users")]
    adapter = LarkBitableAdapter(
        _client(table_list=_Endpoint(_ok(items=items, has_more=False, page_token=None)))
    )

    assert adapter.list_tables("app1") == [RemoteTable(id="tbl1", name="users")]


def test_record_round_trip_calls():
    adapter = LarkBitableAdapter(
        _client(
            record_create=_Endpoint(_ok(record=SimpleNamespace(record_id="rec1"))),
            record_list=_Endpoint(
                _ok(
                    items=[SimpleNamespace(record_id="rec1", fields={"age": 12})],
                    has_more=False,
                    page_token=None,
                )
            ),
            record_update=_Endpoint(_ok()),
            record_delete=_Endpoint(_ok(deleted=True)),
        )
    )

    assert adapter.create_record("app1", "tbl1", {"age": 12}) == "rec1"
    assert adapter.list_records("app1", "tbl1", "AND(CurrentValue.[age]=12)", 100) == [
        RemoteRecord(record_id="rec1", fields={"age": 12})
    ]
    adapter.update_record("app1", "tbl1", "rec1", {"age": 13})
    adapter.delete_record("app1", "tbl1", "rec1")


def test_unsuccessful_response_raises_remote_error():
    adapter = LarkBitableAdapter(_client(record_delete=_Endpoint(_fail())))

    with pytest.raises(RemoteError) as exc_info:
        adapter.delete_record("app1", "tbl1", "rec404")

    assert exc_info.value.code == 1254043
    assert exc_info.value.operation == "delete_record"
    assert "RecordIdNotFound" in str(exc_info.value)


def test_sdk_exception_is_wrapped():
    adapter = LarkBitableAdapter(_client(table_delete=_Endpoint(ConnectionError("reset"))))

    with pytest.raises(RemoteError, match="reset") as exc_info:
        adapter.delete_table("app1", "tbl1")

    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_field_update_and_delete_send_requests():
    update = _Endpoint(_ok(field=SimpleNamespace(field_id="f1")))
    delete = _Endpoint(_ok(field_id="f1", deleted=True))
    adapter = LarkBitableAdapter(_client(field_update=update, field_delete=delete))

    adapter.update_field("app1", "tbl1", "f1", "id", 1)
    adapter.delete_field("app1", "tbl1", "f1")

    assert len(update.requests) == 1
    assert len(delete.requests) == 1
