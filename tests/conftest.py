import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def taichi_cpu():
    """Kernels run on the CPU backend in f32, like the default GPU setup."""
    ti.init(arch=ti.cpu, default_fp=ti.f32)
    yield
