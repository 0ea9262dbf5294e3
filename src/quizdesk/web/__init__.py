"""Web API for quizdesk (FastAPI)."""
