import sys
from pathlib import Path

import matplotlib
import pytest

matplotlib.use("Agg")

# Add the repo root to sys.path so we can import pondcalc without installing
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from pondcalc.config import DEFAULT_CONFIG_PATH, load_config  # noqa: E402
from pondcalc.models import Excavator, PondDimensions, Truck  # noqa: E402


@pytest.fixture
def config():
    """The bundled equipment-defaults.json."""
    return load_config(DEFAULT_CONFIG_PATH)


@pytest.fixture
def pond():
    """40 x 25 x 5 ft pond, 8 hour days (5000 cu ft)."""
    return PondDimensions(length=40.0, width=25.0, depth=5.0, work_hours_per_day=8.0)


@pytest.fixture
def excavator():
    """2.5 cy bucket, 2.0 min cycle -> 63.75 cy/hr at 0.85."""
    return Excavator(id=1, name="Standard", bucket_capacity=2.5, cycle_time=2.0)


@pytest.fixture
def truck():
    """9 cy, 8 min round trip -> 54 cy/hr at 0.80."""
    return Truck(id=1, name="Hauler", capacity=9.0, round_trip_time=8.0)
