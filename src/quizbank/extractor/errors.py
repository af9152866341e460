"""Exceptions raised by the extraction pipeline."""


class ExtractionError(Exception):
    """Run-level extraction failure (e.g. the document cannot be loaded)."""
    pass


class PreconditionError(ExtractionError):
    """Extraction refused before any work (missing file, base id or credential)."""
    pass


class ModelRequestError(ExtractionError):
    """Request to the generative model failed or returned an unusable reply."""
    pass
