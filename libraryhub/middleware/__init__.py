# Middleware package init
"""
LibraryHub Backend — Middleware Package
=========================================

Middleware Chain (request direction):
    [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

The request id is set first so the access log line and every error
response for the same request carry the same correlation id.
"""
