"""
Infrastructure module: database lifecycle, request correlation, keyed locks.
"""
