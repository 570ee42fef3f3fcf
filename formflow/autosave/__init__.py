"""Respondent-side runtime: auto-save pipeline and session driver"""
from .pipeline import AutoSavePipeline
from .session import RespondentSession
from .transport import AnswerPersistence, HttpAnswerPersistence, InMemoryAnswerPersistence

__all__ = [
    "AutoSavePipeline",
    "RespondentSession",
    "AnswerPersistence",
    "HttpAnswerPersistence",
    "InMemoryAnswerPersistence",
]
