"""Tests for package publishing and artifact loading."""

import base64
from unittest.mock import Mock

import pytest

from factories import MODULE_BYTES, publish_effects
from momentx.core.config import ContractConfig
from momentx.core.exceptions import ConfigurationError, PublishError
from momentx.data.artifacts import load_compiled_modules
from momentx.services.publish_service import PublishService, extract_publish_result


class TestExtractPublishResult:
    """Test selection of the package and global object ids."""

    def test_first_new_object_wins(self):
        """Only the first newObject event is used."""
        events = [
            {"publish": {"packageId": "0xpkg"}},
            {"newObject": {"packageId": "0xpkg", "objectId": "0xglobal"}},
            {"newObject": {"packageId": "0xpkg", "objectId": "0xcap"}},
        ]

        result = extract_publish_result(events)

        assert result.module_id == "0xpkg"
        assert result.global_object_id == "0xglobal"

    def test_no_new_object_event(self):
        """Publish effects without a newObject event are fatal."""
        with pytest.raises(PublishError, match="no newObject"):
            extract_publish_result([{"publish": {"packageId": "0xpkg"}}])

    def test_empty_events(self):
        """An empty event list is fatal as well."""
        with pytest.raises(PublishError) as exc_info:
            extract_publish_result([])

        assert exc_info.value.details["event_count"] == 0

    def test_missing_ids(self):
        """A newObject event without ids is rejected."""
        with pytest.raises(PublishError, match="missing packageId or objectId"):
            extract_publish_result([{"newObject": {"packageId": "0xpkg"}}])


class TestLoadCompiledModules:
    """Test reading compiled bytecode."""

    def test_single_file(self, module_file):
        """A single .mv file becomes one base64 blob."""
        modules = load_compiled_modules(module_file)

        assert modules == [base64.b64encode(MODULE_BYTES).decode("ascii")]

    def test_directory_sorted(self, tmp_path):
        """A bytecode directory yields its modules in file name order."""
        directory = tmp_path / "bytecode_modules"
        directory.mkdir()
        (directory / "b_module.mv").write_bytes(b"bbb")
        (directory / "a_module.mv").write_bytes(b"aaa")
        (directory / "notes.txt").write_text("ignored")

        modules = load_compiled_modules(directory)

        assert [base64.b64decode(m) for m in modules] == [b"aaa", b"bbb"]

    def test_missing_path(self, tmp_path):
        """A missing artifact is a configuration error."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_compiled_modules(tmp_path / "missing.mv")

    def test_empty_directory(self, tmp_path):
        """A directory without modules is a configuration error."""
        with pytest.raises(ConfigurationError, match="No .mv modules"):
            load_compiled_modules(tmp_path)

    def test_empty_file(self, tmp_path):
        """A zero-length module is refused."""
        empty = tmp_path / "empty.mv"
        empty.write_bytes(b"")

        with pytest.raises(ConfigurationError, match="empty"):
            load_compiled_modules(empty)


class TestPublishService:
    """Test the publish service with a mocked admin signer."""

    def setup_method(self):
        """Set up test fixtures."""
        self.admin = Mock()
        self.admin.publish.return_value = publish_effects()

    def test_publish(self, module_file):
        """Modules are published with the configured budget."""
        config = ContractConfig(MODULE_PATH=str(module_file), GAS_BUDGET=2000)
        service = PublishService(self.admin, config)

        result = service.publish()

        self.admin.publish.assert_called_once_with(
            [base64.b64encode(MODULE_BYTES).decode("ascii")], gas_budget=2000
        )
        assert result.module_id == "0xpkg"
        assert result.global_object_id == "0xglobal"
        assert service.last_transaction.digest == "publish-digest"

    def test_publish_path_override(self, tmp_path):
        """An explicit path wins over the configured one."""
        other = tmp_path / "other.mv"
        other.write_bytes(b"other")
        service = PublishService(self.admin, ContractConfig(MODULE_PATH="/nowhere.mv"))

        service.publish(str(other))

        modules = self.admin.publish.call_args.args[0]
        assert base64.b64decode(modules[0]) == b"other"

    def test_publish_without_new_object(self, module_file):
        """Missing newObject event aborts the publish."""
        self.admin.publish.return_value = publish_effects()
        self.admin.publish.return_value.events = [{"publish": {"packageId": "0xpkg"}}]
        service = PublishService(self.admin, ContractConfig(MODULE_PATH=str(module_file)))

        with pytest.raises(PublishError):
            service.publish()
