"""
Study module.
Live study sessions over a flashcard set, with one round of explanatory cards.
"""
