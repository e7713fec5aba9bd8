"""
Flashcards module - Flashcard sets, AI card generation and the set creation wizard.
"""
