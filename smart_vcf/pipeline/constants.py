"""Constants for the retrieval pipeline slice."""

# Output Files
COMPRESSED_SUFFIX = ".vcf.gz"
PLAIN_SUFFIX = ".vcf"
PARTIAL_SUFFIX = ".part"
UNVERIFIED_SUFFIX = ".unverified"

# Progress bars
PROGRESS_BAR_FORMAT = "{desc}: {percentage:3.0f}%|{bar:40}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}]"
