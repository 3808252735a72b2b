"""
Hebrew Study Backend - Middleware Package
==========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [Rate Limit] → [GZip] → [CORS] → Route Handler

    - Request ID first: 429 bodies and every log line carry the correlation ID
    - Access Log: sees the final status code (including 429) and total duration
    - Rate Limit: rejects floods before any identity-provider round trip

The catch-all 500 handler runs outside this chain (Starlette's
ServerErrorMiddleware); it reads the ID from request.state.
"""
