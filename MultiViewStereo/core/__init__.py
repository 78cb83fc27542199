"""
Core data model, interfaces and exceptions.
"""
