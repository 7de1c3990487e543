"""External collaborators: blob storage, ingestion, GitHub and Gemini clients, quizzes."""
