"""
RefactorScore

Scores the clean-code quality of each commit by asking a locally hosted
language model to rate the changed files and suggest improvements.
"""

__version__ = "1.0.0"
