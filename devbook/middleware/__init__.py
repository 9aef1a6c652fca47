"""
Devbook API — Middleware Package
=================================

What:  Cross-cutting concerns applied to requests.

Chain:
    Request → [Request ID] → [Access log] → [GZip] → [CORS] → [Authentication*] → Handler

    * Authentication is attached per route (only routes marked
      `requires_auth` in the route table), as a FastAPI dependency rather
      than an ASGI middleware.
"""
