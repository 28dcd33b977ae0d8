"""Failure taxonomy for the import and read paths.

Per-point problems (bad timestamp, non-positive interval) are handled where
they occur and never show up here. Everything below is raised once and
mapped to a status code by the HTTP layer.
"""


class TrackImportError(Exception):
    """The upload could not be turned into an activity."""


class MalformedInput(TrackImportError):
    """Payload is not a readable GPX document."""


class InsufficientData(TrackImportError):
    """Fewer than two usable points."""


class StoreError(Exception):
    """Persisting or reading an activity failed; the transaction was rolled back."""


class ActivityNotFound(Exception):
    """No activity (or no trackpoints) for the requested id."""
