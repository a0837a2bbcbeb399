"""Command implementations behind the `essay_project` CLI."""
