"""
HTTP layer: routes, middleware and dependencies.
"""
