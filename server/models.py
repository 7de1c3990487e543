"""
SQLAlchemy models for the Code Tutor API
"""

import json
import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _load_json(value, default):
    if not value:
        return default
    return json.loads(value)


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class Repository(Base):
    """An ingested codebase (GitHub fetch or zip upload)"""
    __tablename__ = "repositories"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    source_type = Column(String, nullable=False)  # "upload" | "github"
    source_url = Column(String, index=True)
    file_count = Column(Integer, nullable=False, default=0)
    total_size = Column(Integer, nullable=False, default=0)
    languages = Column(Text)  # JSON list stored as TEXT
    storage_path = Column(String, nullable=False)  # blob key prefix
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    explanations = relationship("Explanation", back_populates="repository", cascade="all, delete-orphan")
    quizzes = relationship("Quiz", back_populates="repository", cascade="all, delete-orphan")

    @property
    def language_list(self) -> list[str]:
        return _load_json(self.languages, [])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "source_type": self.source_type,
            "source_url": self.source_url,
            "file_count": self.file_count,
            "total_size": self.total_size,
            "languages": self.language_list,
            "storage_path": self.storage_path,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Repository(id='{self.id}', name='{self.name}', source_type='{self.source_type}')>"


class Explanation(Base):
    """Model output for a file, or for the whole repository under a sentinel path"""
    __tablename__ = "explanations"

    id = Column(String, primary_key=True, default=_new_id)
    repository_id = Column(String, ForeignKey("repositories.id"), nullable=False, index=True)
    file_path = Column(String, nullable=False)  # or "comprehensive-analysis", "data-flow-diagram", ...
    explanation_type = Column(String, nullable=False)  # comprehensive | diagram | flow | overview | function | class
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)  # raw markdown, rendered on view
    diagram_url = Column(Text)  # data URI
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    repository = relationship("Repository", back_populates="explanations")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "repository_id": self.repository_id,
            "file_path": self.file_path,
            "explanation_type": self.explanation_type,
            "title": self.title,
            "content": self.content,
            "diagram_url": self.diagram_url,
            "created_at": _isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<Explanation(id='{self.id}', file_path='{self.file_path}', type='{self.explanation_type}')>"


class Quiz(Base):
    """Generated multiple-choice quiz; questions are embedded as JSON"""
    __tablename__ = "quizzes"

    id = Column(String, primary_key=True, default=_new_id)
    repository_id = Column(String, ForeignKey("repositories.id"), nullable=False, index=True)
    explanation_id = Column(String, ForeignKey("explanations.id"))
    title = Column(String, nullable=False)
    questions = Column(Text)  # JSON: list of QuizQuestion objects
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    repository = relationship("Repository", back_populates="quizzes")
    attempts = relationship("QuizAttempt", back_populates="quiz", cascade="all, delete-orphan")

    @property
    def question_list(self) -> list[dict]:
        return _load_json(self.questions, [])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "repository_id": self.repository_id,
            "explanation_id": self.explanation_id,
            "title": self.title,
            "questions": self.question_list,
            "created_at": _isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<Quiz(id='{self.id}', repository_id='{self.repository_id}')>"


class QuizAttempt(Base):
    """One scored submission for a quiz"""
    __tablename__ = "quiz_attempts"

    id = Column(String, primary_key=True, default=_new_id)
    quiz_id = Column(String, ForeignKey("quizzes.id"), nullable=False, index=True)
    user_session = Column(String, nullable=False)
    answers = Column(Text)  # JSON: question id -> answer text
    score = Column(Integer, nullable=False, default=0)  # 0-100
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    quiz = relationship("Quiz", back_populates="attempts")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "user_session": self.user_session,
            "answers": _load_json(self.answers, {}),
            "score": self.score,
            "created_at": _isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<QuizAttempt(id='{self.id}', quiz_id='{self.quiz_id}', score={self.score})>"
