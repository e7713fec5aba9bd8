"""
Auth module - Email/password accounts and JWT bearer tokens.
"""
