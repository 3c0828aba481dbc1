"""
FastAPI Todo service package.

This module marks the 'src.todo_api' directory as a Python package. The
FastAPI app lives in src.todo_api.main; it is not imported here so that
importing helpers (settings, CSV utilities) has no side effects.
"""
