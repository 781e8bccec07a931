"""
Xync Backend — Middleware Package
=================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [CORS] → [GZip] → [Metrics] → [Request ID] → [Logging] → [Auth] → Route Handler

    1. CORS:        answers preflight requests before anything else runs
    2. Metrics:     counts and times every request, including rejected ones
    3. Request ID:  assigns the correlation id every later log line carries
    4. Logging:     sees the final status, including 401s produced by Auth
    5. Auth:        rejects unauthenticated requests before any handler,
                    dependency or database session is touched

    Starlette wraps middleware in reverse registration order, so main.py
    adds them innermost first.
"""
