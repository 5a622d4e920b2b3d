"""Doping in Professional Bicycle Racing: race-time scatter chart."""

__version__ = "0.1.0"
