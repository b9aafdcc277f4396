"""Domain layer for Stargazer: progression models and their business rules."""
