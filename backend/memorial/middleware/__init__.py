# Middleware package init
"""
Memorial Backend - Middleware Package
======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so every access log line carries the correlation ID.
"""
