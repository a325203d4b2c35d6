"""School controller: listing, distance ranking and creation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError as PydanticValidationError

from app.controllers.dependencies import CatalogDep, ProximityDep, ResolverDep
from app.services import ValidationError
from app.views import (
    CoordinateRequest,
    ErrorResponse,
    OriginResponse,
    RankedSchoolResponse,
    RankedSchoolsResponse,
    SchoolCreatedResponse,
    SchoolResponse,
    ValidationErrorResponse,
)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

router = APIRouter(tags=["schools"])
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_body(request: Request) -> dict[str, Any]:
    """Return form or JSON body fields as a plain dict."""

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError as exc:
            raise ValidationError(
                [{"field": "body", "message": "Malformed JSON body"}]
            ) from exc
        if not isinstance(data, dict):
            raise ValidationError(
                [{"field": "body", "message": "Expected a JSON object"}]
            )
        return data

    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items()}

    return {}


def _wants_json(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    return "application/json" in accept and "text/html" not in accept


@router.get("/listSchools", response_model=None)
async def list_schools(request: Request, catalog: CatalogDep) -> Response:
    schools = await catalog.list_all()
    results = [SchoolResponse.model_validate(school) for school in schools]

    if _wants_json(request):
        return JSONResponse([result.model_dump() for result in results])
    return templates.TemplateResponse(
        request,
        "list_schools.html",
        {"results": results, "origin": None},
    )


@router.post(
    "/listSchools",
    response_model=None,
    responses={
        400: {"model": ValidationErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def rank_schools(
    request: Request,
    resolver: ResolverDep,
    proximity: ProximityDep,
) -> Response:
    body = await _read_body(request)
    try:
        coordinates = CoordinateRequest.model_validate(body)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc

    origin = await resolver.resolve(coordinates.latitude, coordinates.longitude)
    ranked = await proximity.rank_by_distance(origin)

    payload = RankedSchoolsResponse(
        origin=OriginResponse.model_validate(origin),
        results=[RankedSchoolResponse.model_validate(school) for school in ranked],
    )
    if _wants_json(request):
        return JSONResponse(payload.model_dump())
    return templates.TemplateResponse(
        request,
        "list_schools.html",
        {"results": payload.results, "origin": payload.origin},
    )


@router.get("/addSchool", response_model=None)
async def add_school_form(request: Request) -> Response:
    return templates.TemplateResponse(request, "add_school.html", {})


@router.post(
    "/addSchool",
    response_model=SchoolCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ValidationErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def add_school(request: Request, catalog: CatalogDep) -> SchoolCreatedResponse:
    body = await _read_body(request)
    school_id = await catalog.create(
        name=body.get("name"),
        address=body.get("address"),
        latitude=body.get("latitude"),
        longitude=body.get("longitude"),
    )
    return SchoolCreatedResponse(message="School added successfully", id=school_id)


__all__ = ["router", "templates"]
