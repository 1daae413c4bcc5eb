# Middleware package init
"""
NoteBox: Middleware Package
==============================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Security Headers] → Route Handler

    1. Request ID first so every later log line can carry it
    2. Logging measures everything below it, including header work
    3. Security headers are stamped on every routed response
"""
