"""
This orm module contains the ORM (Object-Relational Mapping) models for the subway
network, together with the repositories, Unit of Work and database connection utilities
that persist them.
"""
