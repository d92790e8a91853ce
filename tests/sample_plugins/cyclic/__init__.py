"""A plugin whose command depends on a binding cycle."""
