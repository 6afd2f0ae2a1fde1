import pytest


class FakeClock:
    """Manually advanced monotonic clock whose sleep just moves time forward."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sample_config_yaml(tmp_path):
    """Write a minimal taskgate config YAML and return its path."""
    content = """
taskgate:
  max_concurrent: 4
  requests_per_second: 10
  window_seconds: 0.5
  batch_size: 20
"""
    path = tmp_path / "taskgate_config.yaml"
    path.write_text(content)
    return path


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path, monkeypatch):
    """Keep user and project config files and TASKGATE_* env vars out of tests."""
    from taskgate.config import hierarchy

    monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    monkeypatch.chdir(tmp_path)
    for env_key in hierarchy._ENV_MAP:
        monkeypatch.delenv(env_key, raising=False)
