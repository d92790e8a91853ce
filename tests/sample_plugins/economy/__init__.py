"""A well-formed plugin: one config schema, two listeners, two commands."""
