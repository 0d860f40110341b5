# Middleware package init
"""
Food Catalog Backend: Middleware Package
=========================================

Request chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    Rate limiting rejects before any work is done; the request ID is set
    before the access log line is written so every line carries it.

Also here:
    upload.staged_image: the FastAPI dependency that stages the optional
    `image` multipart field before the food routes run.
"""
