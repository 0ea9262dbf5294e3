"""quizdesk - assignment distribution, quiz-taking and grading service."""

__version__ = "0.1.0"
