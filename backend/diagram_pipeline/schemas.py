from pydantic import BaseModel
from typing import Optional, Dict, Any, List


class NotationRequest(BaseModel):
    code: str
    family: Optional[str] = None  # flowchart | sequence | ... | architecture


class RenderRequest(NotationRequest):
    fallback_svg: Optional[str] = None  # Shown instead of the built-in placeholder


class DetectFamilyRequest(BaseModel):
    text: str  # Free text, possibly with the diagram inside a fenced block


class ValidationResponse(BaseModel):
    valid: bool
    message: Optional[str] = None
    issues: List[Dict[str, Any]] = []


class PrepareResponse(BaseModel):
    code: str
    family: Optional[str] = None
    complex: bool = False
    junctions: List[str] = []
    rewritten: int = 0
    validation: ValidationResponse


class RenderResponse(BaseModel):
    ok: bool
    render_id: str
    svg: Optional[str] = None
    message: Optional[str] = None
    fallback_svg: Optional[str] = None
    syntax_error: bool = False
    line: Optional[int] = None


class DetectFamilyResponse(BaseModel):
    family: str
    code: str  # The notation pulled out of the text


class TemplateResponse(BaseModel):
    family: str
    code: str
