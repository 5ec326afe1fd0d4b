import os
import sys
from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so 'src' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("ENV", "test")
os.environ.setdefault("IMGEDIT_LOG_LEVEL", "WARNING")


@pytest.fixture(scope="session")
def client() -> TestClient:
    # lazy import after env configured
    from src.main import create_app

    app = create_app()
    return TestClient(app)


@pytest.fixture()
def gradient_image():
    from src.domain.entities.image import RasterImage

    h, w = 6, 8
    ramp = np.linspace(0.0, 1.0, h * w, dtype=np.float32).reshape(h, w)
    return RasterImage.from_array(np.stack([ramp, ramp[::-1], np.full_like(ramp, 0.5)], axis=-1))


@pytest.fixture()
def harness():
    from src.infrastructure.execution.harness import ExecutionHarness

    h = ExecutionHarness(max_workers=2)
    yield h
    h.shutdown(wait=True)
