"""
Core: exceptions shared by the converter, normalizer, session manager and gateway.
"""
