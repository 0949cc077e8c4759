from __future__ import annotations

import json
from typing import Any, Callable, Mapping

import lark_oapi as lark
from lark_oapi.api.bitable.v1 import (
    AppTableField,
    AppTableRecord,
    CreateAppRequest,
    CreateAppTableFieldRequest,
    CreateAppTableRecordRequest,
    CreateAppTableRequest,
    CreateAppTableRequestBody,
    DeleteAppTableFieldRequest,
    DeleteAppTableRecordRequest,
    DeleteAppTableRequest,
    ListAppTableFieldRequest,
    ListAppTableRecordRequest,
    ListAppTableRequest,
    ReqApp,
    ReqTable,
    UpdateAppTableFieldRequest,
    UpdateAppTableRecordRequest,
)
from lark_oapi.api.drive.v1 import ListFileRequest

from bitabledb.core.errors import RemoteError
from bitabledb.core.logs import get_logger
from bitabledb.core.models import (
    CONTAINER_TYPE,
    RemoteField,
    RemoteRecord,
    RemoteTable,
    RootFolder,
)

log = get_logger(__name__, component="bitable-adapter")

_ROOT_FOLDER_URI = "/open-apis/drive/explorer/v2/root_folder/meta"
_LIST_PAGE_SIZE = 100


class LarkBitableAdapter:
    """Adapter around lark-oapi Bitable and Drive APIs (apps/tables/fields/records)."""

    def __init__(self, client: lark.Client) -> None:
        self.client = client

    def _call(self, operation: str, fn: Callable[[Any], Any], request: Any, **context: Any):
        """
        Send one SDK request and return the response data.

        SDK exceptions and unsuccessful responses both surface as RemoteError.
        """
        try:
            response = fn(request)
        except Exception as exc:  # noqa: BLE001
            log.error(f"{operation}_failed", error=str(exc), **context)
            raise RemoteError(operation, str(exc)) from exc

        if not response.success():
            log.error(
                f"{operation}_failed",
                code=response.code,
                msg=response.msg,
                log_id=response.get_log_id() if hasattr(response, "get_log_id") else None,
                **context,
            )
            raise RemoteError(operation, response.msg, response.code)

        log.debug(f"{operation}_ok", **context)
        return response.data

    def find_or_create_root_folder(self) -> RootFolder:
        """Return the caller's root folder token and owner id."""
        request = (
            lark.BaseRequest.builder()
            .http_method(lark.HttpMethod.GET)
            .uri(_ROOT_FOLDER_URI)
            .token_types({lark.AccessTokenType.TENANT})
            .build()
        )
        try:
            response = self.client.request(request)
        except Exception as exc:  # noqa: BLE001
            log.error("root_folder_meta_failed", error=str(exc))
            raise RemoteError("root_folder_meta", str(exc)) from exc

        try:
            payload = json.loads(response.raw.content or b"{}")
        except (TypeError, ValueError) as exc:
            raise RemoteError("root_folder_meta", "malformed response") from exc

        code = payload.get("code")
        data = payload.get("data") or {}
        if code not in (0, None) or not data.get("token"):
            log.error("root_folder_meta_failed", code=code, msg=payload.get("msg"))
            raise RemoteError("root_folder_meta", payload.get("msg"), code)

        return RootFolder(token=data["token"], owner_id=data.get("user_id"))

    def create_container(self, name: str, parent_id: str) -> str:
        """Create a Bitable app inside a folder and return its app token."""
        request = (
            CreateAppRequest.builder()
            .request_body(ReqApp.builder().name(name).folder_token(parent_id).build())
            .build()
        )
        data = self._call(
            "create_app",
            self.client.bitable.v1.app.create,
            request,
            name=name,
            folder_token=parent_id,
        )
        return data.app.app_token

    def find_container_by_name(self, name: str, parent_id: str) -> tuple[str, bool]:
        """Search a folder for a Bitable app with the given name."""
        page_token: str | None = None
        while True:
            builder = (
                ListFileRequest.builder()
                .folder_token(parent_id)
                .page_size(_LIST_PAGE_SIZE)
            )
            if page_token:
                builder = builder.page_token(page_token)
            data = self._call(
                "list_files",
                self.client.drive.v1.file.list,
                builder.build(),
                folder_token=parent_id,
            )
            for f in data.files or []:
                if f.name == name and f.type == CONTAINER_TYPE:
                    return f.token, True
            if not data.has_more or not data.next_page_token:
                return "", False
            page_token = data.next_page_token

    def list_fields(self, container_id: str, table_id: str) -> list[RemoteField]:
        """List all fields of a table, following pagination."""
        out: list[RemoteField] = []
        page_token: str | None = None
        while True:
            builder = (
                ListAppTableFieldRequest.builder()
                .app_token(container_id)
                .table_id(table_id)
                .page_size(_LIST_PAGE_SIZE)
            )
            if page_token:
                builder = builder.page_token(page_token)
            data = self._call(
                "list_fields",
                self.client.bitable.v1.app_table_field.list,
                builder.build(),
                app_token=container_id,
                table_id=table_id,
            )
            for f in data.items or []:
                out.append(RemoteField(id=f.field_id, name=f.field_name, type=int(f.type)))
            if not data.has_more or not data.page_token:
                return out
            page_token = data.page_token

    def create_field(
        self, container_id: str, table_id: str, name: str, type: int
    ) -> str:
        """Create a field and return its id."""
        request = (
            CreateAppTableFieldRequest.builder()
            .app_token(container_id)
            .table_id(table_id)
            .request_body(AppTableField.builder().field_name(name).type(int(type)).build())
            .build()
        )
        data = self._call(
            "create_field",
            self.client.bitable.v1.app_table_field.create,
            request,
            app_token=container_id,
            table_id=table_id,
            field=name,
        )
        return data.field.field_id

    def update_field(
        self, container_id: str, table_id: str, field_id: str, name: str, type: int
    ) -> None:
        """Replace a field's name and type."""
        request = (
            UpdateAppTableFieldRequest.builder()
            .app_token(container_id)
            .table_id(table_id)
            .field_id(field_id)
            .request_body(AppTableField.builder().field_name(name).type(int(type)).build())
            .build()
        )
        self._call(
            "update_field",
            self.client.bitable.v1.app_table_field.update,
            request,
            app_token=container_id,
            table_id=table_id,
            field_id=field_id,
            field=name,
        )

    def delete_field(self, container_id: str, table_id: str, field_id: str) -> None:
        """Delete a field by id."""
        request = (
            DeleteAppTableFieldRequest.builder()
            .app_token(container_id)
            .table_id(table_id)
            .field_id(field_id)
            .build()
        )
        self._call(
            "delete_field",
            self.client.bitable.v1.app_table_field.delete,
            request,
            app_token=container_id,
            table_id=table_id,
            field_id=field_id,
        )

    def create_table(self, container_id: str, name: str) -> str:
        """Create a table and return its id."""
        body = CreateAppTableRequestBody.builder().table(ReqTable.builder().name(name).build()).build()
        request = (
            CreateAppTableRequest.builder()
            .app_token(container_id)
            .request_body(body)
            .build()
        )
        data = self._call(
            "create_table",
            self.client.bitable.v1.app_table.create,
            request,
            app_token=container_id,
            table=name,
        )
        return data.table_id

    def list_tables(self, container_id: str) -> list[RemoteTable]:
        """List all tables in an app, following pagination."""
        out: list[RemoteTable] = []
        page_token: str | None = None
        while True:
            builder = (
                ListAppTableRequest.builder()
                .app_token(container_id)
                .page_size(_LIST_PAGE_SIZE)
            )
            if page_token:
                builder = builder.page_token(page_token)
            data = self._call(
                "list_tables",
                self.client.bitable.v1.app_table.list,
                builder.build(),
                app_token=container_id,
            )
            for t in data.items or []:
                out.append(RemoteTable(id=t.table_id, name=t.name))
            if not data.has_more or not data.page_token:
                return out
            page_token = data.page_token

    def delete_table(self, container_id: str, table_id: str) -> None:
        """Delete a table by id."""
        request = (
            DeleteAppTableRequest.builder()
            .app_token(container_id)
            .table_id(table_id)
            .build()
        )
        self._call(
            "delete_table",
            self.client.bitable.v1.app_table.delete,
            request,
            app_token=container_id,
            table_id=table_id,
        )

    def create_record(
        self, container_id: str, table_id: str, fields: Mapping[str, Any]
    ) -> str:
        """Create a record and return its record id."""
        request = (
            CreateAppTableRecordRequest.builder()
            .app_token(container_id)
            .table_id(table_id)
            .request_body(AppTableRecord.builder().fields(dict(fields)).build())
            .build()
        )
        data = self._call(
            "create_record",
            self.client.bitable.v1.app_table_record.create,
            request,
            app_token=container_id,
            table_id=table_id,
        )
        return data.record.record_id

    def list_records(
        self,
        container_id: str,
        table_id: str,
        filter_expression: str,
        page_size: int,
    ) -> list[RemoteRecord]:
        """List records matching a filter formula, following pagination."""
        out: list[RemoteRecord] = []
        page_token: str | None = None
        while True:
            builder = (
                ListAppTableRecordRequest.builder()
                .app_token(container_id)
                .table_id(table_id)
                .page_size(page_size)
            )
            if filter_expression:
                builder = builder.filter(filter_expression)
            if page_token:
                builder = builder.page_token(page_token)
            data = self._call(
                "list_records",
                self.client.bitable.v1.app_table_record.list,
                builder.build(),
                app_token=container_id,
                table_id=table_id,
                filter=filter_expression,
            )
            for r in data.items or []:
                out.append(RemoteRecord(record_id=r.record_id, fields=dict(r.fields or {})))
            if not data.has_more or not data.page_token:
                return out
            page_token = data.page_token

    def update_record(
        self,
        container_id: str,
        table_id: str,
        record_id: str,
        fields: Mapping[str, Any],
    ) -> None:
        """Update a record's field values."""
        request = (
            UpdateAppTableRecordRequest.builder()
            .app_token(container_id)
            .table_id(table_id)
            .record_id(record_id)
            .request_body(AppTableRecord.builder().fields(dict(fields)).build())
            .build()
        )
        self._call(
            "update_record",
            self.client.bitable.v1.app_table_record.update,
            request,
            app_token=container_id,
            table_id=table_id,
            record_id=record_id,
        )

    def delete_record(self, container_id: str, table_id: str, record_id: str) -> None:
        """Delete a record by id."""
        request = (
            DeleteAppTableRecordRequest.builder()
            .app_token(container_id)
            .table_id(table_id)
            .record_id(record_id)
            .build()
        )
        self._call(
            "delete_record",
            self.client.bitable.v1.app_table_record.delete,
            request,
            app_token=container_id,
            table_id=table_id,
            record_id=record_id,
        )
