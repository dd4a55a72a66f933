"""API route definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import FileResponse

from picstyle.api.middleware import get_settings_from_request, read_upload, verify_api_key
from picstyle.api.schemas import (
    ConvertResponse,
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    StyleParametersModel,
    TemplateResponse,
)

if TYPE_CHECKING:
    from picstyle.pool import ConversionPool
    from picstyle.studio import StyleStudio
    from picstyle.templates import Template

API_PREFIX = "/api/v1"
OUTPUTS_PATH = f"{API_PREFIX}/outputs"

router = APIRouter(prefix=API_PREFIX, dependencies=[Depends(verify_api_key)])


def _get_studio(request: Request) -> StyleStudio:
    studio: StyleStudio = request.app.state.studio
    return studio


def _get_pool(request: Request) -> ConversionPool:
    pool: ConversionPool = request.app.state.conversion_pool
    return pool


def _artifact_url(name: str) -> str:
    return f"{OUTPUTS_PATH}/{name}"


def _template_response(template: Template) -> TemplateResponse:
    params = template.style_parameters
    return TemplateResponse(
        id=template.id,
        name=template.name,
        image_count=template.image_count,
        thumbnail_url=_artifact_url(template.thumbnail),
        model=template.model.token,
        style_parameters=StyleParametersModel(
            saturation_factor=params.saturation_factor,
            quantization_step=params.quantization_step,
            edge_threshold=params.edge_threshold,
        ),
        created_at=template.created_at,
    )


@router.get(
    "/templates",
    response_model=list[TemplateResponse],
    summary="List templates",
)
async def list_templates(request: Request) -> list[TemplateResponse]:
    """Return all stored templates."""
    studio = _get_studio(request)
    return [_template_response(t) for t in studio.list_templates()]


@router.post(
    "/templates",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: {"model": ErrorResponse},
        status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
    summary="Create a template from reference images",
)
async def create_template(
    request: Request,
    name: Annotated[str | None, Form()] = None,
    images: Annotated[list[UploadFile] | None, File()] = None,
) -> TemplateResponse:
    """Store a template built from at least five reference images."""
    settings = get_settings_from_request(request)
    payloads = [await read_upload(image, settings.max_file_size) for image in images or []]
    template = await _get_pool(request).run(_get_studio(request).create_template, name or "", payloads)
    return _template_response(template)


@router.delete(
    "/templates/{template_id}",
    response_model=DeleteResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Delete a template",
)
async def delete_template(request: Request, template_id: str) -> DeleteResponse:
    """Remove a template and its thumbnail."""
    _get_studio(request).delete_template(template_id)
    return DeleteResponse()


@router.post(
    "/convert",
    response_model=ConvertResponse,
    response_model_exclude_none=True,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: {"model": ErrorResponse},
        status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
    summary="Convert a photo into outline and/or colored artifacts",
)
async def convert(
    request: Request,
    template_id: Annotated[str | None, Form()] = None,
    photo: Annotated[UploadFile | None, File()] = None,
    generate_outline: Annotated[bool, Form()] = False,
    generate_colored: Annotated[bool, Form()] = False,
) -> ConvertResponse:
    """Run the requested pipelines against a template and return artifact URLs."""
    if not template_id or photo is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="template_id and photo are required")
    settings = get_settings_from_request(request)
    data = await read_upload(photo, settings.max_file_size)
    names = await _get_pool(request).run(
        _get_studio(request).convert,
        template_id,
        data,
        outline=generate_outline,
        colored=generate_colored,
    )
    return ConvertResponse(**{kind: _artifact_url(name) for kind, name in names.items()})


@router.get(
    "/outputs/{name}",
    response_class=FileResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Download a published artifact",
)
async def get_output(request: Request, name: str) -> FileResponse:
    """Serve a thumbnail, outline or colored artifact."""
    store = _get_studio(request).store
    try:
        path = store.path_for(name)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Artifact not found") from None
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Artifact not found")
    return FileResponse(path, media_type="image/jpeg")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    pool = _get_pool(request)
    return HealthResponse(
        status="ok",
        templates=len(_get_studio(request).list_templates()),
        concurrent_requests=pool.active_count,
        queue_depth=pool.queue_depth,
    )
