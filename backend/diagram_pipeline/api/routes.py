import logging

from fastapi import APIRouter, HTTPException, Response

from diagram_pipeline.dsl.families import detect_family, extract_notation, new_diagram_template
from diagram_pipeline.ir.diagram import resolve_family
from diagram_pipeline.pipeline.controller import PipelineController
from diagram_pipeline.renderer.fallback import PlaceholderState, fallback_svg
from diagram_pipeline.schemas import (
    DetectFamilyRequest,
    DetectFamilyResponse,
    NotationRequest,
    PrepareResponse,
    RenderRequest,
    RenderResponse,
    TemplateResponse,
    ValidationResponse,
)
from diagram_pipeline.validation.notation_validator import NotationValidator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/diagrams", tags=["diagrams"])

controller = PipelineController()


def _validation_payload(context) -> ValidationResponse:
    validation = context.validation
    return ValidationResponse(
        valid=context.is_valid,
        message=validation.message if validation else "Invalid diagram code",
        issues=[i.to_dict() for i in context.report.issues] if context.report else [],
    )


@router.post("/prepare", response_model=PrepareResponse)
def prepare_notation(request: NotationRequest):
    context = controller.run(request.code, request.family)
    optimization = context.optimization
    family = context.family or detect_family(context.text)

    return PrepareResponse(
        code=context.text,
        family=family.value if family else None,
        complex=optimization.complex if optimization else False,
        junctions=[j.id for j in optimization.junctions] if optimization else [],
        rewritten=optimization.rewritten if optimization else 0,
        validation=_validation_payload(context),
    )


@router.post("/validate", response_model=ValidationResponse)
def validate_notation_endpoint(request: NotationRequest):
    report = NotationValidator().inspect(request.code, request.family)
    result = report.to_result()
    return ValidationResponse(
        valid=result.valid,
        message=result.message,
        issues=[i.to_dict() for i in report.issues],
    )


@router.post("/render", response_model=RenderResponse)
async def render_notation(request: RenderRequest):
    outcome = await controller.render(
        request.code,
        request.family,
        fallback=request.fallback_svg,
    )
    return RenderResponse(**outcome.to_dict())


@router.get("/fallback/{state}")
def get_fallback(state: PlaceholderState):
    return Response(content=fallback_svg(state), media_type="image/svg+xml")


@router.get("/templates/{family}", response_model=TemplateResponse)
def get_template(family: str):
    resolved = resolve_family(family)
    if resolved is None:
        raise HTTPException(status_code=404, detail=f"Unknown diagram family '{family}'")
    return TemplateResponse(family=resolved.value, code=new_diagram_template(resolved))


@router.post("/detect-family", response_model=DetectFamilyResponse)
def detect_diagram_family(request: DetectFamilyRequest):
    code = extract_notation(request.text)
    family = detect_family(code)
    if family is None:
        raise HTTPException(status_code=400, detail="Could not determine diagram type")
    return DetectFamilyResponse(family=family.value, code=code)
