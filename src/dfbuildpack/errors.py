"""Domain errors for dfbuildpack."""


class BuildpackError(RuntimeError):
    """Raised when the build cannot continue safely."""
