# Middleware package init
"""
Blog API — Middleware Package
=============================

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

    Responses pass back through in reverse, so the logging middleware sees
    the final status code and the request id header is added last.
"""
