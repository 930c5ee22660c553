"""
MissNote
--------

Local persistence core for a personal mistake log: schema management,
entity store, query engine, and ZIP backup/restore.
"""
__version__ = "0.1.0"
