"""Shared models and utilities used across mindscreen services."""
