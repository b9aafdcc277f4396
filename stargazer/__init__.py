"""
Stargazer - celestial collection game progression engine.

Package layout:

- ``stargazer.core``     infrastructure (config, logging, events, slot storage)
- ``stargazer.domain``   rich domain models (catalog, progress, state)
- ``stargazer.database`` SQLAlchemy schema used by the database slot store
- ``stargazer.modules``  game services (exploration, energy, persistence, missions)
"""

__version__ = "0.3.0"
