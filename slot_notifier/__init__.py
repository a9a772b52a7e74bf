"""Polls a slot-query API and notifies when a matching appointment opens up."""

__version__ = "0.1.0"
