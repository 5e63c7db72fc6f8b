"""
Pipeline module for filecopy.

Provides the pieces of a file-copy pipeline: scanning the source directory,
transferring single files, journaling completed transfers and running the
whole thing on an explicit start/stop lifecycle.
"""
