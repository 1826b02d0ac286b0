"""
basecore

Shared infrastructure for the messaging services: settings, logging, database.
"""
