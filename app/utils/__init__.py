"""
Utility package exports
"""

from app.utils.helpers import run_blocking, sign_value, unsign_value

__all__ = ["run_blocking", "sign_value", "unsign_value"]
