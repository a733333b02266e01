"""Data input/output helpers.

- :mod:`export` writes the buffered history as a downloadable JSON file.
- :mod:`kv_store` defines the string key-value contract for small UI state
  (channel visibility); the GUI backs it with ``QSettings``.
"""
