"""
Core: configuration, container, features and authentication.
"""
