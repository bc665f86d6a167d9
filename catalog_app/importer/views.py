"""
Importer blueprint endpoints for CSV upload, mapping discovery, processing and history.
"""

from __future__ import annotations

import io
import time
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user
from sqlalchemy.exc import NoResultFound

from catalog_app.models import Origin, Religion
from catalog_app.utils.importer import get_max_upload_bytes, is_importer_enabled
from catalog_app.utils.permissions import can_manage_imports

from .adapters import CSVAdapterError, CSVRowReader, read_csv_file
from .contracts import GENDER_AUTO, GENDER_CHOICES, get_name_field_specs
from .errors import ImportAbortedError, ImportValidationError
from .mapping import ColumnMapping, ImportOptions
from .pipeline.history_service import HistoryFilters, ImportHistoryService
from .pipeline.orchestrator import run_import
from .utils import allowed_file, cleanup_upload, persist_upload, resolve_upload_token

importer_blueprint = Blueprint("csv_import", __name__, url_prefix="/api/csv-import")

_history_service = ImportHistoryService()


def _json_error(message: str, status: HTTPStatus):
    return jsonify({"success": False, "error": message}), status


def _ensure_importer_enabled_api():
    if not is_importer_enabled(current_app):
        return _json_error("Importer is disabled.", HTTPStatus.NOT_FOUND)
    return None


def _ensure_authenticated_api():
    if not current_user.is_authenticated:
        return _json_error("Authentication required.", HTTPStatus.UNAUTHORIZED)
    return None


def _ensure_manage_imports_permission():
    if not can_manage_imports(current_user):
        return _json_error("Admin access required.", HTTPStatus.FORBIDDEN)
    return None


def _guard(*, manage: bool):
    for check in (_ensure_importer_enabled_api, _ensure_authenticated_api):
        response = check()
        if response:
            return response
    if manage:
        return _ensure_manage_imports_permission()
    return None


def _reference_options(model) -> list[dict]:
    return [{"value": entity.id, "label": entity.name} for entity in model.list_active()]


@importer_blueprint.post("/upload")
def upload_csv():
    """
    Parse an uploaded CSV and return its headers plus a preview.

    Large files stay on disk and are addressed by ``fileToken`` when processing.
    """
    guard_response = _guard(manage=True)
    if guard_response:
        return guard_response

    upload = request.files.get("csvFile")
    if upload is None or not upload.filename:
        return _json_error("No file uploaded.", HTTPStatus.BAD_REQUEST)
    if not allowed_file(upload.filename):
        return _json_error("Only CSV files are allowed.", HTTPStatus.BAD_REQUEST)

    raw_bytes = upload.stream.read()
    if len(raw_bytes) > get_max_upload_bytes(current_app):
        return _json_error("File too large.", HTTPStatus.REQUEST_ENTITY_TOO_LARGE)

    try:
        text = raw_bytes.decode("utf-8-sig")
        reader = CSVRowReader(io.StringIO(text, newline=""))
        rows = reader.read_all()
    except (UnicodeDecodeError, CSVAdapterError) as exc:
        current_app.logger.warning("CSV upload %s could not be parsed: %s", upload.filename, exc)
        return _json_error("Error parsing CSV file", HTTPStatus.BAD_REQUEST)

    preview_rows = int(current_app.config.get("IMPORTER_PREVIEW_ROWS", 10))
    large_threshold = int(current_app.config.get("IMPORTER_LARGE_DATASET_ROWS", 1000))

    data = {
        "headers": list(reader.headers or ()),
        "preview": rows[:preview_rows],
        "totalRows": len(rows),
        "filename": upload.filename,
    }
    if len(rows) > large_threshold:
        upload.stream.seek(0)
        stored_path = persist_upload(upload, current_app)
        data["isLargeDataset"] = True
        data["fileToken"] = stored_path.name
    else:
        data["isLargeDataset"] = False
        data["allData"] = rows

    current_app.logger.info(
        "CSV upload parsed",
        extra={
            "upload_filename": upload.filename,
            "total_rows": len(rows),
            "large_dataset": data["isLargeDataset"],
            "user_id": current_user.id,
        },
    )
    return jsonify({"success": True, "data": data}), HTTPStatus.OK


@importer_blueprint.get("/mapping-fields")
def mapping_fields():
    guard_response = _guard(manage=False)
    if guard_response:
        return guard_response

    required: list[dict] = []
    optional: list[dict] = []
    for spec in get_name_field_specs():
        field_payload = {"key": spec.name, "label": spec.label, "type": spec.field_type, "required": spec.required}
        if spec.name == "gender":
            field_payload["options"] = [{"value": choice, "label": choice.capitalize()} for choice in GENDER_CHOICES]
            field_payload["autoValue"] = GENDER_AUTO
        elif spec.name == "religionId":
            field_payload["options"] = _reference_options(Religion)
        elif spec.name == "originId":
            field_payload["options"] = _reference_options(Origin)
        (required if spec.required else optional).append(field_payload)

    return jsonify({"success": True, "data": {"required": required, "optional": optional}}), HTTPStatus.OK


@importer_blueprint.post("/process")
def process_csv():
    guard_response = _guard(manage=True)
    if guard_response:
        return guard_response

    payload = request.get_json(silent=True) or {}
    if not payload.get("columnMapping"):
        return _json_error("Column mapping is required", HTTPStatus.BAD_REQUEST)

    mapping = ColumnMapping.coerce(payload.get("columnMapping"))
    options = ImportOptions.coerce(payload.get("importOptions"))
    source_label = payload.get("sourceLabel") or payload.get("filename")

    stored_path = None
    rows = payload.get("csvData")
    file_token = payload.get("fileToken")
    if not rows and file_token:
        stored_path = resolve_upload_token(file_token, current_app)
        if stored_path is None:
            return _json_error("Uploaded file not found or expired.", HTTPStatus.BAD_REQUEST)
        try:
            rows = read_csv_file(stored_path)
        except (UnicodeDecodeError, CSVAdapterError) as exc:
            cleanup_upload(stored_path)
            current_app.logger.warning("Stored upload %s could not be parsed: %s", file_token, exc)
            return _json_error("Error parsing CSV file", HTTPStatus.BAD_REQUEST)

    if rows is not None and (not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows)):
        return _json_error("csvData must be a list of rows.", HTTPStatus.BAD_REQUEST)

    start_time = time.perf_counter()
    try:
        summary = run_import(
            rows or [],
            mapping,
            options,
            importer=current_user.id,
            source_label=source_label,
        )
    except ImportValidationError as exc:
        return _json_error(str(exc), HTTPStatus.BAD_REQUEST)
    except ImportAbortedError as exc:
        return _json_error(f"Error processing CSV import: {exc.cause}", HTTPStatus.INTERNAL_SERVER_ERROR)
    finally:
        if stored_path is not None:
            cleanup_upload(stored_path)

    result = summary.as_dict()
    current_app.logger.info(
        "CSV import %s processed in %.2fs",
        summary.import_id,
        time.perf_counter() - start_time,
        extra={
            "import_job_id": summary.import_id,
            "successful": summary.successful_count,
            "failed": summary.failed_count,
            "skipped": summary.skipped_count,
        },
    )
    return (
        jsonify(
            {
                "success": True,
                "message": "CSV import completed",
                "data": {
                    "importId": summary.import_id,
                    "results": {
                        "total": summary.total_rows,
                        "successful": summary.successful_count,
                        "failed": summary.failed_count,
                        "skipped": summary.skipped_count,
                        "newReferencesCreated": summary.new_references_created,
                    },
                    "details": result["details"],
                },
            }
        ),
        HTTPStatus.OK,
    )


@importer_blueprint.get("/history")
def import_history():
    guard_response = _guard(manage=False)
    if guard_response:
        return guard_response

    try:
        filters = HistoryFilters.coerce(
            page=request.args.get("page"),
            limit=request.args.get("limit"),
            status=request.args.get("status"),
            default_limit=int(current_app.config.get("IMPORTER_HISTORY_PAGE_SIZE", 10)),
        )
    except ValueError as exc:
        return _json_error(str(exc), HTTPStatus.BAD_REQUEST)

    page = _history_service.list_imports(filters)
    return (
        jsonify(
            {
                "success": True,
                "data": {
                    "imports": [item.as_dict() for item in page.items],
                    "pagination": page.pagination(),
                },
            }
        ),
        HTTPStatus.OK,
    )


@importer_blueprint.get("/history/<int:import_id>")
def import_detail(import_id: int):
    guard_response = _guard(manage=False)
    if guard_response:
        return guard_response

    try:
        job = _history_service.get_import(import_id)
    except NoResultFound:
        return _json_error("Import not found", HTTPStatus.NOT_FOUND)

    summary = _history_service.summarize(job)
    return jsonify({"success": True, "data": summary.as_dict(include_detail=True)}), HTTPStatus.OK
