"""
Jotter — Persistence Gateway
=============================

What:  Repositories translate note operations into SQLAlchemy statements.
How:   Each repository wraps the request's AsyncSession; services receive a
       repository instead of a session, so the service layer never builds
       queries itself.
"""
