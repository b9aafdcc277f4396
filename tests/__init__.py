"""
Stargazer Test Suite
====================

Test Organization
-----------------
- tests/unit/          : Fast unit tests (in-memory storage, mocked Redis)
- tests/unit/domain/   : Pure domain model tests
- tests/integration/   : Real files and SQLite through aiosqlite

Testing Philosophy
------------------
- Unit tests: Fast, isolated, test progression rules
- Integration tests: Slower, test real storage behavior
- Use pytest markers to categorize and selectively run tests
- Follow AAA pattern: Arrange, Act, Assert
"""
