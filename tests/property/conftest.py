# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Usage:
    from tests.property.conftest import binary_content, extensions

    @given(content=binary_content, ext=extensions)
    def test_save_is_idempotent(content: bytes, ext: str) -> None:
        ...
"""

from __future__ import annotations

from datetime import datetime

from hypothesis import strategies as st

# Image bytes, including empty content
binary_content = st.binary(min_size=0, max_size=4096)

nonempty_binary = st.binary(min_size=1, max_size=4096)

# Valid extensions, mixed case
extensions = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789",
    min_size=1,
    max_size=16,
).map(lambda s: f".{s}")

# Strings that are not 64 lowercase hex characters
invalid_digests = st.one_of(
    st.text(alphabet="0123456789abcdef", max_size=63),
    st.text(alphabet="0123456789abcdef", min_size=65, max_size=80),
    st.text(alphabet="0123456789ABCDEF", min_size=64, max_size=64).filter(lambda s: s != s.lower()),
    st.text(min_size=64, max_size=64).filter(lambda s: any(c not in "0123456789abcdef" for c in s)),
)

# Opaque snapshot text, any unicode except surrogates (not encodable as UTF-8)
snapshots = st.text(alphabet=st.characters(exclude_categories=("Cs",)), max_size=2000)

# Whole-second timestamps that fit the fixed-width filename format
backup_moments = st.datetimes(min_value=datetime(1000, 1, 1), max_value=datetime(9999, 12, 31, 23, 59, 59)).map(
    lambda dt: dt.replace(microsecond=0)
)
