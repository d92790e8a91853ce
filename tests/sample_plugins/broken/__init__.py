"""A plugin with several declaration defects, each in its own module."""
