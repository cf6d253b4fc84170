"""Error types raised by the scaffold pipeline."""


class AppforgeError(Exception):
    """Base class for every error Appforge reports to the user."""


class PreconditionError(AppforgeError):
    """The run cannot start; nothing has been written."""


class PipelineError(AppforgeError):
    """A fatal step failed mid-run. Partial state is left on disk."""


class TemplateError(AppforgeError):
    """The installed template set is missing or malformed."""


class MarkerError(AppforgeError):
    """A delimited block has a start marker without its end (or vice versa)."""


class ManifestMarkerError(MarkerError):
    """The template manifest does not contain its dependency block."""
