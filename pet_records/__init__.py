"""Pet health records: in-memory REST backend plus a headless client store."""

__version__ = "1.0.0"
