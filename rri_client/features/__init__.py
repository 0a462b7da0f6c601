from .batch import BatchReport, BatchRunner

__all__ = ["BatchReport", "BatchRunner"]
