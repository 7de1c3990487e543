"""
Quiz question normalization and attempt scoring.
"""

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from schemas import QuestionResult, QuizQuestion

logger = logging.getLogger(__name__)

OPTION_LETTERS = "ABCD"

FALLBACK_QUESTION = {
    "id": "1",
    "question": "What is the main purpose of this code?",
    "options": ["Authentication", "Data processing", "UI rendering", "Error handling"],
    "correctAnswer": "Authentication",
    "explanation": "Based on the code analysis, this appears to be an authentication flow.",
}


def _resolve_correct_answer(answer, options: list[str]) -> str | None:
    """Accept the option text, a letter (A-D) or a zero-based index."""
    if isinstance(answer, bool):
        return None
    if isinstance(answer, int):
        return options[answer] if 0 <= answer < len(options) else None
    if not isinstance(answer, str):
        return None

    answer = answer.strip()
    if answer in options:
        return answer
    letter = answer.rstrip(").:").upper()
    if len(letter) == 1 and letter in OPTION_LETTERS:
        return options[OPTION_LETTERS.index(letter)]
    return None


def normalize_questions(raw, limit: int | None = None) -> list[dict]:
    """
    Coerce the model's quiz JSON into QuizQuestion dicts.

    Accepts a bare list or an object with a "questions" list. Entries that
    lack four options or a resolvable correct answer are dropped; ids are
    made unique. Falls back to a single generic question when nothing
    usable remains.
    """
    if isinstance(raw, dict):
        raw = raw.get("questions")
    if not isinstance(raw, list):
        raw = []

    questions: list[dict] = []
    seen_ids: set[str] = set()
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            continue
        options = item.get("options")
        if not isinstance(options, list) or len(options) < 4:
            continue
        options = [str(option) for option in options[:4]]

        correct = _resolve_correct_answer(item.get("correctAnswer", item.get("correct_answer")), options)
        if correct is None:
            continue

        question_id = str(item.get("id") or index + 1)
        if question_id in seen_ids:
            question_id = f"{question_id}-{index + 1}"
        seen_ids.add(question_id)

        try:
            question = QuizQuestion(
                id=question_id,
                question=str(item.get("question", "")).strip(),
                options=options,
                correctAnswer=correct,
                explanation=str(item.get("explanation") or ""),
            )
        except ValidationError as e:
            logger.warning(f"Dropping malformed quiz question {question_id}: {e}")
            continue
        if not question.question:
            continue
        questions.append(question.model_dump())

        if limit is not None and len(questions) >= limit:
            break

    if not questions:
        logger.warning("No usable quiz questions in model response; using fallback question")
        return [dict(FALLBACK_QUESTION)]
    return questions


# =============================================================================
# SCORING
# =============================================================================

@dataclass
class AttemptResult:
    score: int
    correct_answers: int
    total_questions: int
    results: list[dict] = field(default_factory=list)


def percent_score(correct: int, total: int) -> int:
    """round(100 * correct / total), halves rounded up; 0 when there are no questions."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def score_attempt(questions: list[dict], answers: dict[str, str]) -> AttemptResult:
    """Answers match by exact string equality with the stored correct answer."""
    correct = 0
    results = []
    for question in questions:
        question_id = str(question.get("id"))
        user_answer = answers.get(question_id)
        is_correct = user_answer is not None and user_answer == question.get("correctAnswer")
        if is_correct:
            correct += 1
        results.append(QuestionResult(
            questionId=question_id,
            question=question.get("question", ""),
            userAnswer=user_answer,
            correctAnswer=question.get("correctAnswer", ""),
            isCorrect=is_correct,
            explanation=question.get("explanation", ""),
        ).model_dump())

    return AttemptResult(
        score=percent_score(correct, len(questions)),
        correct_answers=correct,
        total_questions=len(questions),
        results=results,
    )
