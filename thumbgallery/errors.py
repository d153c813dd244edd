"""
Error taxonomy for the thumbnail pipeline.

Every failure that can happen while turning one selected file into a
thumbnail is reported as a subclass of :class:`PipelineError`, tagged with
the stage that failed.  The batch coordinator catches these per file, so a
single unreadable image never affects its siblings.
"""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base class for per-file pipeline failures.

    Parameters
    ----------
    message: str
        Human readable description of the failure.
    filename: str, optional
        Name of the source file being processed, when known.
    """

    stage = "pipeline"

    def __init__(self, message: str, filename: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.filename = filename

    def __str__(self) -> str:
        if self.filename:
            return f"{self.stage} failed for {self.filename}: {self.message}"
        return f"{self.stage} failed: {self.message}"


class DecodeError(PipelineError):
    """The input is not a readable or supported image."""

    stage = "decode"


class ResampleError(PipelineError):
    """The resize stage failed or returned a surface of the wrong size."""

    stage = "resample"


class EncodeError(PipelineError):
    """The encoder could not produce output (e.g. empty surface)."""

    stage = "encode"
