"""mygit: a minimal content-addressable version-control object store."""

__version__ = "1.0"
