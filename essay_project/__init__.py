"""Front-matter essays: loading, content linting and static HTML rendering."""

__version__ = "0.1.0"
