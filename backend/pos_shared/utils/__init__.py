"""
Utilities: exceptions and schemas.
"""
