"""
IdeaFlow Backend — Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first, as registered in main.create_app):
    Request → [Request ID] → [Logging] → [No-Cache] → [GZip] → [CORS] → Route Handler

    - Request ID runs first so every later log line can carry the id.
    - Logging measures the full handler duration and the final status.
    - No-Cache stamps Cache-Control on /api responses only; /uploads and
      the frontend bundle stay cacheable.
"""
