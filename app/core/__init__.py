"""
Core module - Exceptions and shared dependency providers.
"""
