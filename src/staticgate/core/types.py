"""Core type definitions."""

from typing import NewType

# Normalized URL path (e.g., "/binary/png.png")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)
