"""
Core infrastructure for Stargazer: configuration, logging, events, clock,
infrastructure exceptions and save-slot storage. Nothing in here knows game
rules.
"""
