"""Parallel per-file documentation."""

from .parallel_processor import (
    FileDocumentation,
    FileDocumenter,
    ParallelProcessor,
    ProcessingReport,
)

__all__ = [
    "FileDocumentation",
    "FileDocumenter",
    "ParallelProcessor",
    "ProcessingReport",
]
