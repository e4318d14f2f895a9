"""Shared models, errors and utilities for medintake services."""
