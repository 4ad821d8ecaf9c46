"""Error taxonomy for the content processing pipeline.

Every error a pipeline step can raise derives from ``PipelineError``. The
orchestrator treats them uniformly: the message becomes the record's
``error_message`` and the record is marked FAILED.
"""


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    pass


class ResolutionError(PipelineError):
    """Raw content reference could not be resolved to bytes."""

    pass


class ExtractionError(PipelineError):
    """Plain text could not be extracted from the raw payload."""

    pass


class SummarizationError(PipelineError):
    """The summarization call failed or returned an unusable response."""

    pass


class TransformError(PipelineError):
    """The bionic transform failed or did not match the document schema."""

    pass


class PublishError(PipelineError):
    """The processed artifact could not be uploaded."""

    pass


class NotFoundError(PipelineError):
    """Content record does not exist."""

    pass


class RunConflictError(PipelineError):
    """Another run owns the content record."""

    pass


class PipelineCancelledError(PipelineError):
    """The run was cancelled between steps."""

    def __init__(self, message: str = "Processing cancelled") -> None:
        super().__init__(message)
