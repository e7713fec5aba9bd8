"""
Flashcard Study Backend Application.

A FastAPI backend for studying AI-generated flashcard sets.
Learners mark each card as understood or as needing review, and receive
explanatory cards for the ones they struggled with.
"""

__version__ = "0.1.0"
