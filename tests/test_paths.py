"""Tests for the paths module."""

import tempfile
from pathlib import Path

from display_env_wrapper import paths


class TestAppName:

    def test_app_name(self):
        assert paths.APP_NAME == 'display-env-wrapper'
        assert paths._APP_NAME_DEFAULT == paths.APP_NAME

    def test_in_all_exports(self):
        assert 'APP_NAME' in paths.__all__
        assert 'get_log_file_path' in paths.__all__


class TestProgramLogName:

    def test_strips_directory_and_extension(self):
        assert paths.program_log_name('/opt/pantum/bin/pantum-installer.sh') == 'pantum-installer'

    def test_only_last_extension_removed(self):
        assert paths.program_log_name('driver.tar.gz') == 'driver.tar'

    def test_bare_command(self):
        assert paths.program_log_name('xdg-open') == 'xdg-open'

    def test_none(self):
        assert paths.program_log_name(None) is None
        assert paths.program_log_name('') is None


class TestLogFilePath:

    def test_program_log_file(self, tmp_path):
        result = paths.get_log_file_path('/usr/bin/printer-setup.py', tmp_path)
        assert result == tmp_path / 'display-env-wrapper_printer-setup.log'

    def test_generic_log_file(self, tmp_path):
        assert paths.get_log_file_path(None, tmp_path) == tmp_path / 'display-env-wrapper.log'

    def test_defaults_to_temp_dir(self):
        result = paths.get_log_file_path('tool')
        assert result.parent == Path(tempfile.gettempdir())

    def test_rotated_sibling(self, tmp_path):
        log_file = tmp_path / 'display-env-wrapper.log'
        assert paths.get_rotated_log_path(log_file) == tmp_path / 'display-env-wrapper.log.old'


class TestOtherPaths:

    def test_config_file(self):
        assert paths.get_config_file_path() == Path('/etc/display-env-wrapper/config.json')

    def test_runtime_dir(self):
        assert paths.get_runtime_dir(1000) == Path('/run/user/1000')

    def test_runtime_dir_custom_root(self, tmp_path):
        assert paths.get_runtime_dir(42, tmp_path) == tmp_path / '42'
