"""Streaming retrieval-and-filter pipeline: per-contig workers and the runner."""

from .output import OutputWriter, output_path_for, unverified_path_for
from .retrieval import ContigRetrieval, retrieve_contig
from .runner import RetrievalPipeline, run_retrieval

__all__ = [
    "ContigRetrieval",
    "OutputWriter",
    "RetrievalPipeline",
    "output_path_for",
    "retrieve_contig",
    "run_retrieval",
    "unverified_path_for",
]
