"""
Conversion core: entity registry, graph assembler, sinks and the
generic file/query pipeline shared by every converter.
"""
