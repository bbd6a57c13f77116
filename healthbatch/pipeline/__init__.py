"""
Pipeline Module

Batch processing for health measurement records:
clean -> transform -> validate -> analyze.
"""

from healthbatch.pipeline.processor import BatchProcessor, build_submission, process_records
from healthbatch.pipeline.sample_data import sample_records

__all__ = ["BatchProcessor", "build_submission", "process_records", "sample_records"]
