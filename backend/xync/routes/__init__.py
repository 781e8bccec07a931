"""
Xync Backend — API Routes Package
=================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:        POST /auth/register, POST /auth/login   (public)
                      GET  /auth/me
    - bookmarks.py:   GET/POST /bookmarks, POST /bookmarks/preview
                      GET/PUT/DELETE /bookmarks/{id}
    - notes.py:       GET/POST /notes, GET/PUT/DELETE /notes/{id}
    - tags.py:        GET/POST /tags, GET/PUT/DELETE /tags/{id}
    - categories.py:  GET/POST /categories, GET/PUT/DELETE /categories/{id}
    - health.py:      GET /health, /health/live, /health/ready  (public)
    - metrics.py:     GET /metrics (Prometheus text format)     (public)

Design Principle:
    Routes are THIN. They take the caller's id from `get_current_user_id`,
    hand it to a service as an explicit argument, and turn the result into
    a response model. Ownership checks, transactions and error translation
    live in the services and the global exception handlers.
"""
