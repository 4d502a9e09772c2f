"""truthvote: community fact-checking with AI-assisted verdicts."""

__version__ = "0.3.0"
