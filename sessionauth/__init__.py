"""
sessionauth - session-backed authentication service.
"""

__version__ = "1.0.0"
