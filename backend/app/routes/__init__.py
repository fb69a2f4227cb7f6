# backend/app/routes/__init__.py
"""
HTTP routes for the Spyke marketplace.

All application routes are versioned and live in v1/.
"""
