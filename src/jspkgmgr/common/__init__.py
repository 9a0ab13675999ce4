"""Shared helpers: process execution, log capture and logging setup."""
