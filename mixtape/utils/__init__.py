from .batching import batch_offsets, chunked

__all__ = ["batch_offsets", "chunked"]
