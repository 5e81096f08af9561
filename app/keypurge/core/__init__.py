"""Core keypurge engine.

Keyspace enumeration, reconciliation, orchestration, configuration
and supporting infrastructure.
"""
