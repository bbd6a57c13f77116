"""Transform modules for cleaning, normalizing and validating batches."""

from healthbatch.transforms.cleaners import RecordCleaner, clean
from healthbatch.transforms.normalizers import RecordNormalizer, parse_timestamp, transform
from healthbatch.transforms.validators import RecordValidator, validate

__all__ = [
    "RecordCleaner",
    "RecordNormalizer",
    "RecordValidator",
    "clean",
    "transform",
    "validate",
    "parse_timestamp",
]
