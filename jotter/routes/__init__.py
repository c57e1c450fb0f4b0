# Routes package init
"""
Jotter — Routes Package
========================

Route Inventory:
    - notes.py:   server-rendered note pages (list, create, show, edit,
                  update, delete) and the `/` redirect
    - health.py:  GET /health (JSON service health check)

Routes handle HTTP only: read the request, call NoteService, render a page
or redirect.
"""
