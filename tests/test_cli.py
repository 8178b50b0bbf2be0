"""Tests for the paketboot command line."""

import logging

import pytest
import requests

from paketboot import cli, log_utils
from paketboot.config import BootstrapOptions
from paketboot.download.orchestrator import BootstrapResult
from paketboot.exceptions import DownloadError

pytestmark = [pytest.mark.unit]


@pytest.fixture(autouse=True)
def _restore_logging():
    level = log_utils.logger.level
    handlers = list(log_utils.logger.handlers)
    yield
    for handler in log_utils.logger.handlers[:]:
        if handler not in handlers:
            log_utils.logger.removeHandler(handler)
            handler.close()
    log_utils.set_log_level(logging.getLevelName(level))


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def mock_run(mocker):
    """Patch chain building and the bootstrap run, returning the Bootstrapper mock."""
    mocker.patch("paketboot.cli.build_strategy_chain", return_value="head")
    bootstrapper = mocker.patch("paketboot.cli.Bootstrapper")
    bootstrapper.return_value.run.return_value = BootstrapResult("downloaded", "1.0.0")
    return bootstrapper


def _parse(*argv):
    options = BootstrapOptions()
    cli.apply_arguments(options, cli.build_parser().parse_args(list(argv)))
    return options


class TestApplyArguments:
    def test_no_arguments_keeps_defaults(self):
        assert _parse() == BootstrapOptions()

    def test_prerelease_keyword(self):
        options = _parse("Prerelease")

        assert options.ignore_prerelease is False
        assert options.download_version is None

    def test_explicit_version(self):
        options = _parse("5.257.0")

        assert options.download_version == "5.257.0"
        assert options.ignore_prerelease is True

    def test_source_flags(self):
        options = _parse(
            "--prefer-nuget", "--force-nuget", "--nuget-source", "/srv/packages"
        )

        assert options.prefer_nuget is True
        assert options.force_nuget is True
        assert options.nuget_source == "/srv/packages"

    def test_max_file_age_self_and_no_cache(self):
        options = _parse("--max-file-age", "120", "--self", "-f")

        assert options.max_file_age == 120
        assert options.self_update is True
        assert options.use_cache is False

    def test_target_moves_bootstrapper_alongside(self, tmp_path):
        target = tmp_path / "tools" / "paket.exe"

        options = _parse("--target", str(target))

        assert options.target == str(target)
        assert options.bootstrapper_path == str(target.parent / "paket.bootstrapper.exe")

    @pytest.mark.parametrize(
        "argv, level",
        [
            (["-v"], "DEBUG"),
            (["-s"], "ERROR"),
            (["-s", "-s"], "SILENT"),
            (["-s", "-v"], "ERROR"),
            ([], "INFO"),
        ],
    )
    def test_verbosity(self, argv, level):
        assert _parse(*argv).log_level == level


class TestMain:
    def test_success(self, workdir, mock_run):
        assert cli.main(["5.257.0"]) == 0

        options, head = mock_run.call_args.args
        assert head == "head"
        assert options.download_version == "5.257.0"
        mock_run.return_value.run.assert_called_once_with()

    def test_config_file_values_are_overridden_by_arguments(self, workdir, mock_run):
        (workdir / "paket.bootstrapper.yaml").write_text(
            "PREFER_NUGET: true\nMAX_FILE_AGE: 5\n"
        )

        assert cli.main(["--max-file-age", "60"]) == 0

        options = mock_run.call_args.args[0]
        assert options.prefer_nuget is True
        assert options.max_file_age == 60

    def test_invalid_config_returns_error(self, workdir, mock_run):
        (workdir / "paket.bootstrapper.yaml").write_text("USE_CACHE: maybe\n")

        assert cli.main([]) == 1
        mock_run.assert_not_called()

    def test_missing_explicit_config_returns_error(self, workdir, mock_run):
        assert cli.main(["--config", "nope.yaml"]) == 1

    @pytest.mark.parametrize(
        "error",
        [
            DownloadError("Unable to determine a version"),
            requests.ConnectionError("offline"),
            PermissionError("locked"),
        ],
    )
    def test_run_failure_returns_error(self, workdir, mock_run, error):
        mock_run.return_value.run.side_effect = error

        assert cli.main([]) == 1

    def test_unexpected_errors_propagate(self, workdir, mock_run):
        mock_run.return_value.run.side_effect = KeyError("bug")

        with pytest.raises(KeyError):
            cli.main([])

    def test_negative_max_file_age_is_a_usage_error(self, workdir, mock_run):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--max-file-age", "-5"])

        assert excinfo.value.code == 2
        mock_run.assert_not_called()

    def test_verbose_sets_debug_level(self, workdir, mock_run):
        cli.main(["-v"])

        assert log_utils.logger.level == logging.DEBUG

    def test_double_silent_suppresses_everything(self, workdir, mock_run):
        cli.main(["-s", "-s"])

        assert not log_utils.logger.isEnabledFor(logging.CRITICAL)

    def test_log_dir_enables_file_logging(self, workdir, mock_run, tmp_path):
        log_dir = tmp_path / "logs"

        assert cli.main(["--log-dir", str(log_dir)]) == 0

        assert (log_dir / "paketboot.log").exists()
