"""Domain layer for hangarledger: import pipeline, backup and export.

Submodules are imported directly (``hangarledger.domain.preview`` and so on);
this package deliberately re-exports nothing so the database layer can depend
on ``hangarledger.domain.entities`` without pulling in the services.
"""
