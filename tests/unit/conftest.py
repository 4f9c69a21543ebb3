"""Unit-test fixtures: services wired over in-memory fakes (see workbench.py)."""

import pytest

from workbench import Workbench, build_workbench


@pytest.fixture
def bench() -> Workbench:
    return build_workbench()
