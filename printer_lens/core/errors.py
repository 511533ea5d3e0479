class PrinterLensError(Exception):
    """Base class for every error raised by the detection service."""


class ModelLoadFailure(PrinterLensError):
    """
    The model artifact could not be loaded. Fatal for the detection feature:
    it is a configuration problem, reported to the operator and never retried.
    """


class InferenceFailure(PrinterLensError):
    """The model raised while running on a single frame. Only that frame is lost."""
