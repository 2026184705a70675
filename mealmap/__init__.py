"""
Meal map API package.

A FastAPI application that validates food-center submissions and passes
them through to the managed Postgres backend, with an in-memory database
for development and tests.
"""
