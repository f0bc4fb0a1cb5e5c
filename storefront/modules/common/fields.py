"""Partial-update helpers."""

# Sentinel used to differentiate between "not provided" and explicit None.
UNSET = object()
