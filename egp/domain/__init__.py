"""Domain layer for the EGP node.

Pure value objects, governance records, state machines and the error
taxonomy. Nothing in this package performs I/O.
"""
