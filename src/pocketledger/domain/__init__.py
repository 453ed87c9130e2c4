"""Domain layer for pocketledger application.

Services are imported from their modules directly (for example
``pocketledger.domain.transaction``); the database layer imports
``pocketledger.domain.entities``, so this package stays import-free.
"""
