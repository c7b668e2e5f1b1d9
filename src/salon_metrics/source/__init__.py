"""Record source access.

- base: RecordSource interface (select / rpc / maybe_single)
- postgrest: HTTP implementation for a hosted PostgREST backend
- memory: in-memory implementation over lists of dicts
- queries: typed, establishment-scoped reads returning DataFrames
"""

from salon_metrics.source.base import RecordSource
from salon_metrics.source.memory import InMemoryRecordSource
from salon_metrics.source.postgrest import PostgrestSource, make_session

__all__ = ["InMemoryRecordSource", "PostgrestSource", "RecordSource", "make_session"]
