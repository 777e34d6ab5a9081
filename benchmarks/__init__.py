"""
Benchmark suite for lazyjson document access.

Compares reading a few fields through lazy views against fully
materializing the document with:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Measures access speed and peak memory across different document shapes.
"""
