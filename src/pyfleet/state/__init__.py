"""State/store layer.

Change notifications from the document store are converted here into
typed events. All writes go back through the store's conditional,
partial-field update path.
"""
