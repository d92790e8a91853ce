"""A self-contained plugin: needs nothing bound beyond the bootstrap defaults."""
