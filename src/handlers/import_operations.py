"""
Lambda handler for CSV statement import operations.

Each request replays the import pipeline on a fresh session: the file is
staged, processed with the requested template or mapping, and (for commit)
the selected rows are written as one batch.
"""
import logging
import logging.config
import os
from typing import Dict, Any, Optional, Tuple

from models.column_mapping import ColumnMapping
from models.import_session import ImportMode, ImportStatus
from models.import_template import default_catalog
from services.import_session_service import ImportSessionService
from utils.auth import NotFound
from utils.handler_decorators import api_handler
from utils.import_config import get_import_config
from utils.import_errors import ImportLimitExceeded
from utils.lambda_utils import (
    create_response,
    mandatory_body_parameter,
    optional_body_parameter,
    parse_json_body,
)
from utils.s3_dao import get_object_content, get_object_metadata

# Configure logging
log_conf = os.environ.get('LOGGING_CONFIG')
if log_conf:
    logging.config.fileConfig(log_conf)
else:
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

logger = logging.getLogger(__name__)


def _read_upload(body: Dict[str, Any], user_id: str) -> Tuple[str, bytes, Optional[str]]:
    """
    Resolve the uploaded file from inline content or an S3 key.

    S3 keys are laid out as {user_id}/{file_id}/{file_name}; keys outside the
    caller's prefix are reported as missing.
    """
    file_name = mandatory_body_parameter(body, 'fileName')
    content_type = optional_body_parameter(body, 'contentType')
    content = optional_body_parameter(body, 'content')
    s3_key = optional_body_parameter(body, 's3Key')

    if not isinstance(file_name, str):
        raise ValueError("fileName must be a string")
    if content_type is not None and not isinstance(content_type, str):
        raise ValueError("contentType must be a string")

    if content is not None:
        if not isinstance(content, str):
            raise ValueError("content must be a string")
        return file_name, content.encode('utf-8'), content_type

    if not s3_key:
        raise KeyError("Body parameter content or s3Key is required")
    if not isinstance(s3_key, str):
        raise ValueError("s3Key must be a string")
    if not s3_key.startswith(f"{user_id}/"):
        logger.warning(f"User {user_id} requested S3 key outside their prefix: {s3_key}")
        raise NotFound("File not found")

    metadata = get_object_metadata(s3_key)
    if metadata is None:
        raise NotFound("File not found")
    max_bytes = get_import_config().max_file_bytes
    if (metadata.get('content_length') or 0) > max_bytes:
        raise ImportLimitExceeded(
            f"File is {metadata['content_length']} bytes; the limit is {max_bytes} bytes"
        )

    data = get_object_content(s3_key)
    if data is None:
        raise NotFound("File not found")
    return file_name, data, content_type or metadata.get('content_type')


def _start_session(body: Dict[str, Any], user_id: str, mode: Optional[ImportMode] = None) -> ImportSessionService:
    """Stage the upload, apply template and mode, and process the file."""
    file_name, content, content_type = _read_upload(body, user_id)

    service = ImportSessionService(user_id)
    service.select_file(file_name, content, content_type)

    template_id = optional_body_parameter(body, 'templateId')
    if template_id is not None and not isinstance(template_id, str):
        raise ValueError("templateId must be a string")
    if template_id:
        service.select_template(template_id)

    requested_mode = mode or optional_body_parameter(body, 'mode')
    if requested_mode:
        service.set_mode(ImportMode(requested_mode))

    service.process()
    return service


def _mapping_from_body(body: Dict[str, Any], required: bool) -> Optional[ColumnMapping]:
    raw = mandatory_body_parameter(body, 'mapping') if required else optional_body_parameter(body, 'mapping')
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError("mapping must be an object")
    return ColumnMapping.from_dict(raw)


def list_templates_handler(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle GET /imports/templates - List the bank templates available for import."""
    return {"templates": [template.to_dict() for template in default_catalog]}


def preview_import_handler(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """
    Handle POST /imports/preview - Process a file and return the session snapshot.

    In standard mode the snapshot holds the validated candidates (or every
    validation issue); in advanced mode it holds the suggested mapping.
    """
    body = parse_json_body(event)
    service = _start_session(body, user_id)
    logger.info(f"Preview for user {user_id} ended in status {service.status.value}")
    return service.snapshot()


def submit_mapping_handler(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Handle POST /imports/mapping - Apply a user-chosen column mapping and return the snapshot."""
    body = parse_json_body(event)
    mapping = _mapping_from_body(body, required=True)
    service = _start_session(body, user_id, mode=ImportMode.ADVANCED)
    if service.status == ImportStatus.MAPPING:
        service.submit_mapping(mapping)
    return service.snapshot()


def commit_import_handler(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """
    Handle POST /imports/commit - Import the selected rows of a file.

    Returns 201 with the snapshot on success and 422 when the file, mapping or
    write was rejected.
    """
    body = parse_json_body(event)
    mapping = _mapping_from_body(body, required=False)
    selection = optional_body_parameter(body, 'selection')
    if selection is not None and (
        not isinstance(selection, list)
        or not all(isinstance(i, int) and not isinstance(i, bool) for i in selection)
    ):
        raise ValueError("selection must be a list of row indices")

    service = _start_session(body, user_id, mode=ImportMode.ADVANCED if mapping else None)
    if service.status == ImportStatus.MAPPING:
        if mapping is None:
            raise KeyError("Body parameter mapping is required in advanced mode")
        service.submit_mapping(mapping)

    if service.status == ImportStatus.PREVIEW:
        if selection is not None:
            service.set_selection(selection)
        service.import_selected()

    status_code = 201 if service.status == ImportStatus.SUCCESS else 422
    return create_response(status_code, service.snapshot())


@api_handler()
def handler(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Main handler for import operations."""
    route = event.get("routeKey")
    if not route:
        raise ValueError("Route not specified")

    route_map = {
        "GET /imports/templates": list_templates_handler,
        "POST /imports/preview": preview_import_handler,
        "POST /imports/mapping": submit_mapping_handler,
        "POST /imports/commit": commit_import_handler,
    }

    handler_func = route_map.get(route)
    if not handler_func:
        raise ValueError(f"Unsupported route: {route}")

    logger.info(f"Processing {route} request for user {user_id}")
    return handler_func(event, user_id)
