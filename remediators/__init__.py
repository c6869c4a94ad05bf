"""
Remediators for classified exiftool failures.

One module per ErrorKind; remediators.registry wires them together.
"""
