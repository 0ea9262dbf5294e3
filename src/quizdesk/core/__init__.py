"""Core business logic.

Modules:
- asc_parser, asc_highlight, bulk_questions: question entry formats
- accounts, admin: users, sessions and approval
- assignments, distribution: authoring and handing out work
- submissions, scoring, grading: quiz attempts and marks
- completions: reading assignment tracking
- files: attachment storage and preview
- analytics: score statistics
"""
