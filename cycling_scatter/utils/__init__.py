"""Shared configuration and constants."""
