from services.quiz import FALLBACK_QUESTION, normalize_questions, percent_score, score_attempt


def _question(qid, correct="A1"):
    return {
        "id": qid,
        "question": f"Question {qid}?",
        "options": ["A1", "B1", "C1", "D1"],
        "correctAnswer": correct,
        "explanation": "because",
    }


def test_three_of_four_scores_75():
    questions = [_question(str(i)) for i in range(1, 5)]
    answers = {"1": "A1", "2": "A1", "3": "A1", "4": "B1"}

    result = score_attempt(questions, answers)

    assert result.score == 75
    assert result.correct_answers == 3
    assert result.total_questions == 4
    assert [r["isCorrect"] for r in result.results] == [True, True, True, False]


def test_zero_questions_scores_zero():
    result = score_attempt([], {"1": "A1"})
    assert result.score == 0
    assert result.total_questions == 0
    assert result.results == []


def test_answers_match_by_exact_string():
    result = score_attempt([_question("1")], {"1": "a1"})
    assert result.score == 0
    assert result.results[0]["userAnswer"] == "a1"


def test_unanswered_question_counts_as_wrong():
    result = score_attempt([_question("1"), _question("2")], {"1": "A1"})
    assert result.score == 50
    assert result.results[1]["userAnswer"] is None


def test_percent_score_rounds_half_up():
    assert percent_score(1, 3) == 33
    assert percent_score(2, 3) == 67
    assert percent_score(1, 8) == 13  # 12.5
    assert percent_score(0, 0) == 0


def test_normalize_accepts_object_with_questions_key():
    questions = normalize_questions({"questions": [_question("q1")]})
    assert questions == [_question("q1")]


def test_normalize_maps_letter_answers():
    raw = [dict(_question("1"), correctAnswer="C")]
    assert normalize_questions(raw)[0]["correctAnswer"] == "C1"


def test_normalize_drops_bad_entries_and_dedupes_ids():
    raw = [
        _question("1"),
        {"id": "2", "question": "Too few options", "options": ["a", "b"], "correctAnswer": "a"},
        dict(_question("3"), correctAnswer="not an option"),
        _question("1"),
        "garbage",
    ]
    questions = normalize_questions(raw)
    assert [q["id"] for q in questions] == ["1", "1-4"]


def test_normalize_respects_limit():
    raw = [_question(str(i)) for i in range(10)]
    assert len(normalize_questions(raw, limit=3)) == 3


def test_normalize_falls_back_when_nothing_usable():
    assert normalize_questions(None) == [FALLBACK_QUESTION]
    assert normalize_questions([{"question": "no options"}]) == [FALLBACK_QUESTION]
    assert len(FALLBACK_QUESTION["options"]) == 4
