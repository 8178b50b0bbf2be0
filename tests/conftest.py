import time

import platformdirs
import pytest
import requests

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """Register the markers used across the test suite."""
    config.addinivalue_line("markers", "unit: fast isolated unit tests")
    config.addinivalue_line(
        "markers", "core_downloads: tests of the strategy / cache core"
    )


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point every platformdirs location and proxy variable at an isolated temp layout.

    Creates temp directories for data (which holds the artifact cache), config and
    logs, patches platformdirs to return them, and clears proxy environment
    variables so proxy resolution is deterministic.
    """
    base = tmp_path_factory.mktemp("paketboot")
    data_dir = base / "data"
    config_dir = base / "config"
    log_dir = base / "log"

    for path in (data_dir, config_dir, log_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_DATA_HOME", str(data_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    for name in (
        "HTTP_PROXY",
        "HTTPS_PROXY",
        "ALL_PROXY",
        "NO_PROXY",
        "http_proxy",
        "https_proxy",
        "all_proxy",
        "no_proxy",
        "GITHUB_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)

    monkeypatch.setattr(
        platformdirs, "user_data_dir", lambda *_args, **_kwargs: str(data_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_log_dir", lambda *_args, **_kwargs: str(log_dir)
    )


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing HTTP entry points with blocking callables.
    """
    requests.get = _block_network
    requests.post = _block_network
    requests.head = _block_network
    requests.Session.request = _block_network


@pytest.fixture(autouse=True)
def _mock_time_sleep(monkeypatch):
    """Make time.sleep instant for all tests to prevent retry delays."""
    monkeypatch.setattr(time, "sleep", lambda *_args, **_kwargs: None)


@pytest.fixture
def cache_dir(tmp_path):
    """An empty artifact cache root."""
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def sample_release_data():
    """Sample GitHub releases API payload for fsprojects/Paket."""
    return [
        {
            "tag_name": "5.258.0-alpha001",
            "prerelease": True,
            "draft": False,
            "assets": [{"name": "paket.exe", "size": 10}],
        },
        {
            "tag_name": "5.257.0",
            "prerelease": False,
            "draft": False,
            "assets": [{"name": "paket.exe", "size": 10}],
        },
        {
            "tag_name": "5.256.0",
            "prerelease": False,
            "draft": False,
            "assets": [{"name": "paket.exe", "size": 10}],
        },
    ]


class FakeStrategy:
    """
    Factory for in-memory download strategies that record their calls.

    Built lazily so the paketboot import happens after the isolation fixtures.
    """

    @staticmethod
    def build(name="Fake", latest="1.0.0", payload=b"paket-bytes", error=None):
        from paketboot.download.base import DownloadStrategy

        class _Fake(DownloadStrategy):
            def __init__(self):
                super().__init__()
                self.calls = []
                self.latest = latest
                self.payload = payload
                self.error = error

            @property
            def name(self):
                return name

            def _get_latest_version_core(self, ignore_prerelease):
                self.calls.append(("latest", ignore_prerelease))
                if self.error is not None:
                    raise self.error
                return self.latest

            def _download_version_core(self, version, target):
                self.calls.append(("download", version, target))
                if self.error is not None:
                    raise self.error
                with open(target, "wb") as f:
                    f.write(self.payload)

            def _self_update_core(self, version):
                self.calls.append(("self_update", version))
                if self.error is not None:
                    raise self.error

        return _Fake()


@pytest.fixture
def make_strategy():
    """Return a factory building recording fake strategies."""
    return FakeStrategy.build
