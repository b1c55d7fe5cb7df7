import asyncio

from fastapi import APIRouter, HTTPException, Request, status

from ats_optimizer.compliance.rulebook import validate_compliance
from ats_optimizer.core.rate_limit import rate_limit
from ats_optimizer.features.gap_analyzer import analyze_gaps
from ats_optimizer.schemas.compliance import ComplianceReport
from ats_optimizer.schemas.gap import GapReport
from ats_optimizer.schemas.optimizer import (
    ClassifiedSkill,
    ComplianceRequest,
    GapRequest,
    OptimizationResult,
    OptimizeRequest,
    SkillClassifyRequest,
    SkillClassifyResponse,
)
from ats_optimizer.services.errors import InputTooLarge
from ats_optimizer.services.optimizer_service import check_input_size, optimize_resume
from ats_optimizer.services.scoring import top_keyword_count
from ats_optimizer.taxonomy import aggregate_skills, get_default_taxonomy_provider

router = APIRouter()


def _raise_too_large(exc: InputTooLarge) -> None:
    raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc


@router.post("/optimize", response_model=OptimizationResult)
@rate_limit()
async def optimize(request: Request, payload: OptimizeRequest):
    _ = request
    try:
        return await asyncio.to_thread(
            optimize_resume,
            payload.resume,
            payload.job_description,
            target_role=payload.target_role,
            mode=payload.mode,
            extraction_mode=payload.extraction_mode,
        )
    except InputTooLarge as exc:
        _raise_too_large(exc)


@router.post("/compliance", response_model=ComplianceReport)
@rate_limit()
async def compliance(request: Request, payload: ComplianceRequest):
    _ = request
    try:
        check_input_size(payload.resume, payload.job_description)
    except InputTooLarge as exc:
        _raise_too_large(exc)
    top_keywords = payload.top_keywords
    if top_keywords is None:
        gap = analyze_gaps(payload.resume, payload.job_description)
        top_keywords = gap.top_terms(top_keyword_count())
    return validate_compliance(payload.resume, payload.job_description, top_keywords)


@router.post("/gaps", response_model=GapReport)
@rate_limit()
async def gaps(request: Request, payload: GapRequest):
    _ = request
    try:
        check_input_size(payload.resume, payload.job_description)
    except InputTooLarge as exc:
        _raise_too_large(exc)
    return analyze_gaps(payload.resume, payload.job_description)


@router.post("/skills/classify", response_model=SkillClassifyResponse)
@rate_limit()
async def classify_skills(request: Request, payload: SkillClassifyRequest):
    _ = request
    provider = get_default_taxonomy_provider()
    classified = [
        ClassifiedSkill(
            raw=raw,
            normalized=provider.canonicalize(raw),
            category=provider.classify(raw),
            display=provider.format_display_name(raw),
        )
        for raw in payload.skills
        if raw.strip()
    ]
    aggregation = aggregate_skills(provider, payload.skills)
    return SkillClassifyResponse(
        skills=classified,
        categories=aggregation.categories,
        dropped=aggregation.dropped,
    )
