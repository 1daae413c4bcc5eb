# Routes package init
"""
NoteBox: API Routes Package
==============================

Route Inventory:
    - notes.py:   POST /add, POST /get, POST /update, GET /all, DELETE /delete
    - health.py:  GET /health

Routes are THIN: read the body, check required fields, call NoteStore,
wrap the result. Errors are raised and mapped centrally in main.py.
"""
