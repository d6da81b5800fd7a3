# Middleware package init
"""
Bookshelf Backend: Middleware Package
======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Logging measures the full downstream duration and final status
    3. GZip and CORS come from FastAPI/Starlette

Responses travel the chain in reverse, which is where the X-Request-ID
header is attached and the access line is written.
"""
