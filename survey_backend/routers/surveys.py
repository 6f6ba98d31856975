from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from survey_backend.auth import get_current_user
from survey_backend.dependencies import get_repository
from survey_backend.errors import AlreadyResponded, InvalidAnswer, NotFound, TransportFailure
from survey_backend.schemas import (
    Identity,
    SubmitResponseIn,
    SubmitResponseOut,
    Survey,
    SurveyResponse,
    SurveyStats,
    SurveyView,
    UserAnalytics,
)
from survey_backend.services.analytics import compute_stats, compute_user_analytics
from survey_backend.services.ingestion import submit_response
from survey_backend.services.repository import SurveyRepository

router = APIRouter(tags=["surveys"])

RETRY_DETAIL = "The survey service is unavailable, please try again."


def _load_survey(repo: SurveyRepository, survey_id: str) -> Survey:
    try:
        survey = repo.get_survey(survey_id)
    except TransportFailure:
        raise HTTPException(status_code=503, detail=RETRY_DETAIL)
    if survey is None:
        raise HTTPException(status_code=404, detail=f"Survey {survey_id} not found")
    return survey


def _require_creator(repo: SurveyRepository, survey_id: str, current: Identity) -> Survey:
    survey = _load_survey(repo, survey_id)
    if survey.user_id != current.id:
        raise HTTPException(status_code=403, detail="Only the survey creator can view this")
    return survey


@router.get("/surveys/{survey_id}", response_model=SurveyView)
def get_survey(
    survey_id: str,
    current: Identity = Depends(get_current_user),
    repo: SurveyRepository = Depends(get_repository),
):
    survey = _load_survey(repo, survey_id)
    try:
        questions = repo.get_survey_questions(survey_id)
        already = repo.has_user_responded(survey_id, current.id)
    except TransportFailure:
        raise HTTPException(status_code=503, detail=RETRY_DETAIL)
    return SurveyView(
        survey=survey,
        questions=questions,
        accepting_responses=survey.accepting_responses(),
        already_responded=already,
    )


@router.post("/surveys/{survey_id}/responses", response_model=SubmitResponseOut, status_code=201)
def post_response(
    survey_id: str,
    payload: SubmitResponseIn,
    current: Identity = Depends(get_current_user),
    repo: SurveyRepository = Depends(get_repository),
):
    try:
        response_id, student_id = submit_response(
            repo, payload.answers, survey_id, current.id, student_id=payload.student_id
        )
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AlreadyResponded:
        raise HTTPException(status_code=409, detail="You have already submitted this survey")
    except InvalidAnswer as e:
        raise HTTPException(status_code=422, detail=str(e))
    except TransportFailure:
        raise HTTPException(status_code=503, detail=RETRY_DETAIL)
    return SubmitResponseOut(response_id=response_id, student_id=student_id)


@router.get("/surveys/{survey_id}/responses", response_model=List[SurveyResponse])
def list_responses(
    survey_id: str,
    current: Identity = Depends(get_current_user),
    repo: SurveyRepository = Depends(get_repository),
):
    _require_creator(repo, survey_id, current)
    try:
        return repo.get_survey_responses(survey_id)
    except TransportFailure:
        raise HTTPException(status_code=503, detail=RETRY_DETAIL)


@router.get("/surveys/{survey_id}/stats", response_model=SurveyStats)
def survey_stats(
    survey_id: str,
    current: Identity = Depends(get_current_user),
    repo: SurveyRepository = Depends(get_repository),
):
    _require_creator(repo, survey_id, current)
    try:
        return compute_stats(repo, survey_id)
    except TransportFailure:
        raise HTTPException(status_code=503, detail=RETRY_DETAIL)


@router.get("/users/me/surveys", response_model=List[Survey])
def my_surveys(
    current: Identity = Depends(get_current_user),
    repo: SurveyRepository = Depends(get_repository),
):
    try:
        return repo.get_user_surveys(current.id)
    except TransportFailure:
        raise HTTPException(status_code=503, detail=RETRY_DETAIL)


@router.get("/users/me/analytics", response_model=UserAnalytics)
def my_analytics(
    current: Identity = Depends(get_current_user),
    repo: SurveyRepository = Depends(get_repository),
):
    try:
        return compute_user_analytics(repo, current.id)
    except TransportFailure:
        raise HTTPException(status_code=503, detail=RETRY_DETAIL)
