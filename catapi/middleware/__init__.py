"""
Cat Registry API — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [Rate Limit] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs and error envelopes, 429s included
    2. Logging: method, path, status and duration with the request ID
    3. Rate Limit: reject abusive clients before any route work

    Responses travel the chain in reverse, so the request ID header is
    added and the duration measured on the way out.
"""
