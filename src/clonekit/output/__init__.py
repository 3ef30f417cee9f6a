"""Presentation layer — renders CommandReport for humans or machines."""
