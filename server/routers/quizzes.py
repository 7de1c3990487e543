"""
Quiz generation and attempt scoring endpoints.
"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from database import get_db
from models import Explanation, Quiz, QuizAttempt
from routers import call_model, get_repository_or_404, limiter
from schemas import AttemptRequest, QuizRequest
from services import prompts
from services.gemini import GeminiClient, get_gemini_client
from services.quiz import normalize_questions, score_attempt

logger = logging.getLogger(__name__)

router = APIRouter(tags=["quizzes"])

DEFAULT_EXPLANATION_COUNT = 3


@router.post("/repositories/{repository_id}/quiz", status_code=201)
@limiter.limit("10/minute")
async def generate_quiz(
    request: Request,
    repository_id: str,
    body: QuizRequest,
    db: Session = Depends(get_db),
    gemini: GeminiClient = Depends(get_gemini_client),
):
    """Generate a multiple-choice quiz from stored explanations."""
    repository = get_repository_or_404(db, repository_id)
    explanations = (
        db.query(Explanation)
        .filter(Explanation.repository_id == repository.id)
        .order_by(Explanation.created_at)
        .all()
    )
    if body.explanation_ids:
        wanted = set(body.explanation_ids)
        relevant = [e for e in explanations if e.id in wanted]
    else:
        relevant = explanations[:DEFAULT_EXPLANATION_COUNT]

    explanation_content = "\n\n---\n\n".join(f"Title: {e.title}\nContent: {e.content}" for e in relevant)
    prompt = prompts.build_quiz_prompt(body.question_count, body.difficulty.value, explanation_content)
    parsed, _ = await call_model(gemini.generate_json, prompt)
    questions = normalize_questions(parsed, limit=body.question_count)

    quiz = Quiz(
        repository_id=repository.id,
        explanation_id=relevant[0].id if relevant else None,
        title=f"Quiz: {relevant[0].title if relevant else 'Code Understanding'}",
        questions=json.dumps(questions),
    )
    db.add(quiz)
    db.commit()
    db.refresh(quiz)
    logger.info(f"Created quiz {quiz.id} with {len(questions)} questions for {repository.id}")
    return {"quiz": quiz.to_dict()}


@router.post("/quizzes/{quiz_id}/attempt", status_code=201)
@limiter.limit("30/minute")
def submit_attempt(
    request: Request,
    quiz_id: str,
    body: AttemptRequest,
    db: Session = Depends(get_db),
):
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found")

    answers = {answer.questionId: answer.answer for answer in body.answers}
    result = score_attempt(quiz.question_list, answers)

    attempt = QuizAttempt(
        quiz_id=quiz.id,
        user_session=body.user_session,
        answers=json.dumps(answers),
        score=result.score,
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)

    return {
        "attempt": attempt.to_dict(),
        "score": result.score,
        "correct_answers": result.correct_answers,
        "total_questions": result.total_questions,
        "results": result.results,
    }
