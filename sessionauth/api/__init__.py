"""
HTTP surface: dependencies, middleware and versioned routers.
"""
