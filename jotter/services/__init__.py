# Services package init
"""
Jotter — Services Layer
========================

What:  Business logic between the routes (HTTP) and the repositories
       (persistence).

Service Inventory:
    - NoteService: validation and CRUD orchestration for notes

Routes get a ready NoteService through `jotter.dependencies.get_note_service`,
which wires it to the request's database session.
"""
