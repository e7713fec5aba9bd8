"""
Analysis module - Per-set study progress.
Summarises how many cards were understood, marked for review or added as explanations.
"""
