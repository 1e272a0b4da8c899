"""Shared fixtures for the annexure test suite.

Provides:
- A fresh SessionContext per test
- A fake rasterizer that reports per-page progress without touching PyMuPDF
- A fake vision client returning canned replies
- Small real PDFs built with PyMuPDF
"""

import json
from typing import Any, Dict, List, Optional

import fitz
import pytest

from annexure.services.session import SessionContext


SCENARIO_RESPONSE = json.dumps({
    "bills": [
        {"billerName": "City Clinic", "billNumber": "B-1", "billDate": "01-01-2024", "billAmount": "150.5"},
    ],
    "patientDetails": {"name": "A"},
    "policyHolderDetails": {"name": "B", "policyNumber": "P1"},
})


class FakeRasterizer:
    """Stands in for convert_pdf_bytes_to_images."""

    def __init__(self, page_count: int = 4, error: Optional[Exception] = None):
        self.page_count = page_count
        self.error = error
        self.calls: List[bytes] = []

    async def __call__(self, pdf_bytes: bytes, on_page_progress=None, zoom=None) -> List[bytes]:
        self.calls.append(pdf_bytes)
        if self.error is not None:
            raise self.error
        images = []
        for page_num in range(self.page_count):
            images.append(f"page-{page_num + 1}".encode())
            if on_page_progress is not None:
                on_page_progress((page_num + 1) / self.page_count)
        return images


class FakeVisionClient:
    """Stands in for VisionClient, replaying canned replies in order."""

    def __init__(self, *replies: Any):
        self.replies = list(replies)
        self.payloads: List[Dict[str, Any]] = []

    async def complete(self, payload: Dict[str, Any]) -> Optional[str]:
        self.payloads.append(payload)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def session() -> SessionContext:
    return SessionContext()


@pytest.fixture
def rasterizer() -> FakeRasterizer:
    return FakeRasterizer()


def make_pdf(page_count: int = 2) -> bytes:
    """Build a small text-only PDF."""
    document = fitz.open()
    for page_num in range(page_count):
        page = document.new_page()
        page.insert_text((72, 72), f"City Clinic - Bill B-{page_num + 1}")
    pdf_bytes = document.tobytes()
    document.close()
    return pdf_bytes


@pytest.fixture
def sample_pdf() -> bytes:
    return make_pdf(3)
