"""
Security module: the credential verifier (JWT + bcrypt) and rate limiting.
"""
