"""
Feature modules for Stargazer.

Each subpackage owns one concern (catalog, exploration, energy, persistence,
missions); ``shared`` holds the exceptions and pure formulas they have in
common.
"""
