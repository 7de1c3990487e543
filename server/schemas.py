"""
Code Tutor API Schema Definitions

Pydantic models for request bodies and the structured data the model is
asked to return. Response bodies are built from the ORM rows' to_dict().
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================

class SourceType(str, Enum):
    """How a repository was ingested"""
    UPLOAD = "upload"
    GITHUB = "github"


class ExplanationType(str, Enum):
    """Kinds of explanation rows"""
    COMPREHENSIVE = "comprehensive"
    DIAGRAM = "diagram"
    FLOW = "flow"
    OVERVIEW = "overview"
    FUNCTION = "function"
    CLASS = "class"


class Difficulty(str, Enum):
    """Quiz difficulty passed through to the prompt"""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# =============================================================================
# REPOSITORIES
# =============================================================================

class GithubIngestRequest(BaseModel):
    """Request body for POST /repositories/github"""
    url: str = Field(..., min_length=1, description="GitHub repository URL (https://github.com/owner/repo)")
    branch: str = Field("main", description="Branch or tree SHA to fetch")


class AnalyzeRequest(BaseModel):
    """Request body for POST /repositories/analyze"""
    source: str = Field(..., min_length=1, description="GitHub URL; uploads go through /repositories/upload")
    branch: str = Field("main", description="Branch to fetch when the repository is new")


# =============================================================================
# EXPLANATIONS
# =============================================================================

class ExplainRequest(BaseModel):
    """Request body for POST /repositories/{id}/explain"""
    file_path: str = Field(..., min_length=1, description="Path of the stored file")
    start_line: int | None = Field(None, ge=1, description="First line (1-based, inclusive)")
    end_line: int | None = Field(None, ge=1, description="Last line (inclusive)")
    explanation_type: ExplanationType = Field(ExplanationType.OVERVIEW, description="Kind of explanation")


class GeneratedExplanation(BaseModel):
    """What the model is asked to return for a code section"""
    title: str | None = None
    content: str | None = None
    diagram: str | None = None


# =============================================================================
# QUIZZES
# =============================================================================

class QuizRequest(BaseModel):
    """Request body for POST /repositories/{id}/quiz"""
    explanation_ids: list[str] | None = Field(None, description="Explanations to quiz on; defaults to the first three")
    difficulty: Difficulty = Field(Difficulty.INTERMEDIATE, description="Difficulty level")
    question_count: int = Field(5, ge=1, le=20, description="Number of questions to request")


class QuizQuestion(BaseModel):
    """A single multiple-choice question embedded in a quiz"""
    id: str = Field(..., description="Identifier unique within the quiz")
    question: str = Field(..., description="Prompt text")
    options: list[str] = Field(..., min_length=4, max_length=4, description="Exactly four answer options")
    correctAnswer: str = Field(..., description="Literal text of the correct option")
    explanation: str = Field("", description="Why the answer is correct")

    @field_validator("options")
    @classmethod
    def options_are_text(cls, value: list[str]) -> list[str]:
        return [str(option) for option in value]


class QuizAnswer(BaseModel):
    """One submitted answer"""
    questionId: str = Field(..., description="QuizQuestion.id being answered")
    answer: str = Field(..., description="Chosen option text")


class AttemptRequest(BaseModel):
    """Request body for POST /quizzes/{id}/attempt"""
    answers: list[QuizAnswer] = Field(default_factory=list)
    user_session: str = Field(..., min_length=1, description="Opaque session identifier")


class QuestionResult(BaseModel):
    """Per-question outcome of an attempt"""
    questionId: str
    question: str
    userAnswer: str | None
    correctAnswer: str
    isCorrect: bool
    explanation: str
