from .progress_reporter import NullProgressReporter, RichProgressReporter

__all__ = ["NullProgressReporter", "RichProgressReporter"]
