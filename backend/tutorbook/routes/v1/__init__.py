# backend/tutorbook/routes/v1/__init__.py
"""Versioned API routers, mounted under /api/v1 in main.py."""
