"""Service bulk import from Excel / CSV / JSON.

Endpoints:
    GET  /api/services/upload/template   Download template (?format=excel|csv)
    POST /api/services/upload            Parse + validate a file, return a preview
    POST /api/services/upload/create     Create the previewed services
"""

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse, Response, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from carrier_lookup.auth.deps import DemoUser, require_admin
from carrier_lookup.config import settings
from carrier_lookup.database import get_db
from carrier_lookup.middleware.exceptions import BusinessLogicError, MalformedFileError
from carrier_lookup.schemas.service_import import (
    CreationResponse,
    ParsedService,
    UploadSummary,
    UploadValidationResponse,
)
from carrier_lookup.services.service_import import (
    SERVICE_FIELDS,
    SERVICE_INSTRUCTIONS,
    SERVICE_SAMPLE_ROWS,
    commit_parsed_services,
    validate_service_upload,
)
from carrier_lookup.utils.file_import import (
    generate_template_csv,
    generate_template_xlsx,
    parse_rows,
)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/template")
async def service_template(format: str = Query("excel", pattern="^(excel|csv)$")):
    if format == "csv":
        csv_text = generate_template_csv(SERVICE_FIELDS, SERVICE_SAMPLE_ROWS)
        return StreamingResponse(
            iter([csv_text]),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="service-template.csv"'},
        )

    workbook = generate_template_xlsx(
        SERVICE_FIELDS,
        SERVICE_SAMPLE_ROWS,
        sheet_title="Services",
        instructions=SERVICE_INSTRUCTIONS,
    )
    return Response(
        content=workbook,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="service-template.xlsx"'},
    )


@router.post("", response_model=UploadValidationResponse)
async def upload_services(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    """Validate an upload without writing anything.

    Returns 200 when every service is valid, otherwise 400 with the same
    body so the preview can still show what would have been created.
    """
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise MalformedFileError("Uploaded file is too large")

    rows = parse_rows(
        content,
        SERVICE_FIELDS,
        filename=file.filename,
        content_type=file.content_type,
    )
    report = await validate_service_upload(db, rows)

    body = UploadValidationResponse(
        success=report.is_valid,
        data=report.parsed_services,
        errors=report.errors,
        warnings=report.warnings,
        summary=UploadSummary(
            total_services=len(report.parsed_services),
            total_routes=report.total_routes,
        ),
    )
    if not report.is_valid:
        return JSONResponse(status_code=400, content=body.model_dump(mode="json", by_alias=True))
    return body


@router.post("/create", response_model=CreationResponse)
async def create_uploaded_services(
    services: list[ParsedService] = Body(...),
    db: AsyncSession = Depends(get_db),
    _user: DemoUser = Depends(require_admin),
):
    """Create services from a validated preview; each one succeeds or fails on its own."""
    if not services:
        raise BusinessLogicError("No services data provided", error_code="EMPTY_IMPORT")

    summary, results = await commit_parsed_services(db, services)
    return CreationResponse(success=True, summary=summary, results=results)
