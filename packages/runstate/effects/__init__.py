"""
Effects module - passive supply modifiers and their trigger registry.
"""
