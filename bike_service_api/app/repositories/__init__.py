"""
Persistence layer: abstract repository contracts and their SQLite
implementations.
"""
