"""Musical artist influence graph.

This package provides:
- A Wikipedia content source with retry and rate limiting
- Relation extraction from wiki markup
- Artist resolution backed by a pluggable store (memory, SQLite, Neo4j)
- A bounded breadth-first graph builder, exposed over HTTP and a CLI
"""

__version__ = "0.1.0"
