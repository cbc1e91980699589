# tests/conftest.py
from __future__ import annotations

# Import/bootstrap so "import backend" works when running pytest from repo root
import sys
from pathlib import Path
from typing import List

import pytest

TESTS_DIR = Path(__file__).resolve().parent
REPO_ROOT = TESTS_DIR.parent

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from backend.llms.captioner_strategy import CaptionerStrategy  # noqa: E402
from backend.models.caption_models import CaptionRequest  # noqa: E402

# Smallest valid PNG; content is never decoded, only sent as bytes
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c63f8cfc0f01f0005000202a7e5d6a80000000049454e44ae426082"
)


class FakeCaptioner(CaptionerStrategy):
    """Records every request and answers with a fixed text."""

    provider_name = "fake"

    def __init__(self, reply: str = "  A dog sitting on grass.  "):
        self.reply = reply
        self.requests: List[CaptionRequest] = []

    def caption(self, request: CaptionRequest) -> str:
        self.requests.append(request)
        return self.reply.strip()

    def is_available(self) -> bool:
        return True


@pytest.fixture
def fake_captioner() -> FakeCaptioner:
    return FakeCaptioner()


@pytest.fixture
def image_tree(tmp_path: Path) -> Path:
    """
    root/
      a.jpg, B.PNG, c.jpeg, notes.md, d.gif
      sub/e.png, sub/f.txt
      .hidden/g.jpg
      sub/.cache/h.png
    """
    (tmp_path / "sub" / ".cache").mkdir(parents=True)
    (tmp_path / ".hidden").mkdir()

    for rel in ("a.jpg", "B.PNG", "c.jpeg", "sub/e.png", ".hidden/g.jpg", "sub/.cache/h.png"):
        (tmp_path / rel).write_bytes(PNG_BYTES)
    for rel in ("notes.md", "d.gif", "sub/f.txt"):
        (tmp_path / rel).write_text("not an image", encoding="utf-8")

    return tmp_path
