"""Transports and response sinks."""
