"""
Claim ingestion: CSV reading and row cleaning.
"""

from .cleaner import ClaimIdAllocator, clean_data, clean_row, parse_claim_date
from .csv_reader import RawRow, parse_csv, read_csv_file, sample_csv_text

__all__ = [
    "ClaimIdAllocator",
    "RawRow",
    "clean_data",
    "clean_row",
    "parse_claim_date",
    "parse_csv",
    "read_csv_file",
    "sample_csv_text",
]
