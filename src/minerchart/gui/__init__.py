"""Desktop front end built with PySide6 and pyqtgraph.

The widgets here only forward input to :mod:`minerchart.core` and draw what
it computes; the device API is reached through Qt's network stack on the
same event loop.
"""
