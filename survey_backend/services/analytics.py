# services/analytics.py
from __future__ import annotations

from survey_backend.schemas import QuestionStat, SurveyCount, SurveyStats, UserAnalytics
from survey_backend.services.repository import SurveyRepository


def compute_stats(repo: SurveyRepository, survey_id: str) -> SurveyStats:
    """Raw submitted values and a count per question; no numeric aggregation."""
    responses = repo.get_survey_responses(survey_id)
    per_question = {}
    for response in responses:
        for answer in response.answers:
            stat = per_question.setdefault(answer.question_id, QuestionStat())
            stat.responses += 1
            stat.values.append(answer.value)
    return SurveyStats(total_responses=len(responses), per_question=per_question)


def compute_user_analytics(repo: SurveyRepository, user_id: str) -> UserAnalytics:
    surveys = repo.get_user_surveys(user_id)
    total_responses = 0
    counts = []
    # One round trip per survey.
    for survey in surveys:
        n = len(repo.get_survey_responses(survey.id))
        total_responses += n
        counts.append(SurveyCount(id=survey.id, title=survey.title, response_count=n))

    return UserAnalytics(
        total_surveys=len(surveys),
        total_responses=total_responses,
        average_responses_per_survey=total_responses / len(surveys) if surveys else 0,
        per_survey=counts,
    )
