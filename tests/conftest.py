"""Shared test fixtures."""

from pathlib import Path

import pytest
from staticgate.checks import DEFAULT_EXPECTATIONS
from staticgate.config import (
    AssetsConfig,
    Config,
    MountConfig,
    ResponseConfig,
    ServerConfig,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01"
JPG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\xff\xd9"
WOFF2_BYTES = b"wOF2\x00\x01\x00\x00\x00\x00\x08\xd0\x00\x0b"


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Create the asset tree used by the acceptance matrix.

    Layout::

        data-files/
        ├── ff404.png            # exists, but outside the /binary mount
        ├── subdir/ff404.png     # exists, but outside the /binary mount
        └── binary/
            ├── png.png
            ├── jpg.jpg
            ├── glyphicons-halflings-regular.woff2
            ├── index.html
            ├── 404.html
            ├── .secret.png
            └── subdir/png.png
    """
    root = tmp_path / "data-files"
    binary = root / "binary"
    (binary / "subdir").mkdir(parents=True)
    (root / "subdir").mkdir()

    (binary / "png.png").write_bytes(PNG_BYTES)
    (binary / "jpg.jpg").write_bytes(JPG_BYTES)
    (binary / "glyphicons-halflings-regular.woff2").write_bytes(WOFF2_BYTES)
    (binary / "subdir" / "png.png").write_bytes(PNG_BYTES + b"subdir")
    (binary / "index.html").write_text("<h1>Binary</h1>")
    (binary / "404.html").write_text("<h1>Missing</h1>")
    (binary / ".secret.png").write_bytes(PNG_BYTES)

    (root / "ff404.png").write_bytes(PNG_BYTES)
    (root / "subdir" / "ff404.png").write_bytes(PNG_BYTES)
    return root


@pytest.fixture
def test_config(data_dir: Path) -> Config:
    """Create a configuration mounting data-files/binary under /binary."""
    return Config(
        server=ServerConfig(),
        assets=AssetsConfig(
            root=data_dir,
            mounts=[MountConfig(prefix="/binary", directory=data_dir / "binary")],
        ),
        response=ResponseConfig(),
        checks=list(DEFAULT_EXPECTATIONS),
    )
