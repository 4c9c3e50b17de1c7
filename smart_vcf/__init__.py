"""Smart VCF downloader.

Streams remote per-contig VCFs, keeps only the records inside a set of
regions of interest, and verifies each download against its checksum
without ever writing the full file to disk.
"""

__version__ = "1.0.0"
