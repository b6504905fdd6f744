"""docs-cache — keeps a local Markdown mirror of external documentation."""

__version__ = "1.0.0"
