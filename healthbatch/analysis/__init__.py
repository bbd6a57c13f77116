"""Aggregate analysis of processed batches."""

from healthbatch.analysis.analyzer import BatchAnalyzer, analyze, group_by

__all__ = ["BatchAnalyzer", "analyze", "group_by"]
