import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "geometry: spline, bounds and LOD geometry tests")
    config.addinivalue_line("markers", "io: CyHair loading and pbrt emission tests")
