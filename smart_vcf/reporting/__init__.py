"""Run summary reporting."""

from .summary import log_summary, results_to_frame, write_summary

__all__ = ["log_summary", "results_to_frame", "write_summary"]
