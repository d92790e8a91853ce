"""Importable plugin packages used as scan targets by the test suite."""
