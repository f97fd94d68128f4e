"""
Todo service package.

A FastAPI application exposing CRUD endpoints for todo records stored in
MongoDB. The application factory lives in ``todo_api.main.create_app``; run the
server with ``python -m todo_api``.
"""

__version__ = "1.0.0"
