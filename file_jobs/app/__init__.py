"""Qt-facing state objects.

The job engine itself is Qt-free; this package turns its subscriber callbacks
into Qt signals so widgets and QML can bind to them.
"""
