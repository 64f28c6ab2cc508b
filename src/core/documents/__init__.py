from src.core.documents.sequential_id import (
    SequentialIdAllocator,
    format_sequential_id,
    next_sequence_number,
    parse_sequence_suffix,
)

__all__ = [
    "SequentialIdAllocator",
    "format_sequential_id",
    "next_sequence_number",
    "parse_sequence_suffix",
]
