"""
Shared domain helpers for the meal map: option lists, geo math, opening
hours, ranking, address parsing and translations.

Nothing in this package imports FastAPI or a database client, so the same
helpers back the API, the seed script and the tests.
"""
