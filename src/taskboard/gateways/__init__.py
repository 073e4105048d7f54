"""
Task gateway adapters (all implement core.ports.TaskGateway).

- memory_gateway.py: dict-backed, for demos and tests
- sqlite_gateway.py: local SQLite file
- rest_gateway.py: PostgREST / Supabase-style HTTP API
"""
