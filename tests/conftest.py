"""
Pytest configuration and shared fixtures for cadassist tests.
"""

import pytest

from fakes import FakeDocument


# ─── Fake host documents ─────────────────────────────────────────────────


@pytest.fixture
def doc():
    """An empty fake host document."""
    return FakeDocument()


@pytest.fixture
def trim_doc():
    """Fake document with a 1000 mm³ target and a panel tool.

    Tests script ``trim_results`` (volume after trimming, per direction flag).
    """
    document = FakeDocument()
    document.body("TARGET", 1000.0)
    document.body("PANEL", 5.0)
    return document


@pytest.fixture
def outline(doc):
    """Four 25 mm curves of a closed square outline (total length 100)."""
    corners = [(0, 0, 0), (25, 0, 0), (25, 25, 0), (0, 25, 0)]
    return [
        doc.curve(f"LINE({i + 1})", 25.0, corners[i], corners[(i + 1) % 4])
        for i in range(4)
    ]


@pytest.fixture
def listed_doc(doc):
    """Fake document with the listing handler attached for the test's duration."""
    from cadassist.core.listing import attach_listing, detach_listing

    attach_listing(doc)
    yield doc
    detach_listing(doc)
