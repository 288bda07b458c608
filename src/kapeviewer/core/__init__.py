"""Core domain logic package.

This package contains pure business logic for timeline construction.
Modules here must not import GUI frameworks (PySide6, Qt, etc.).
"""
