"""
Sparkwell Test Suite
====================

Test Organization
-----------------
- tests/unit/          : Fast unit tests (pure logic, mocks, no database)
- tests/integration/   : Services end to end against a temporary SQLite file

Testing Philosophy
------------------
- Unit tests: fast, isolated, test business rules
- Integration tests: real transactions, real constraint behavior
- Use pytest markers (unit, integration, database, domain) to select runs
- Follow AAA pattern: Arrange, Act, Assert
"""
