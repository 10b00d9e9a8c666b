"""Domain layer for ledgerkit application.

Services live in their own modules (``ledgerkit.domain.journal`` and so on)
and are imported from there; this package stays import-free so the database
layer can load ``ledgerkit.domain.entities`` without pulling in services.
"""
