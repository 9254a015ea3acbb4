"""Indexing and search services built on the document store."""
