"""Unit tests for the terrifi-gen command line."""

import json

import pytest

from terrifi_gen.cli import main
from terrifi_gen.client import ControllerError
from terrifi_gen.models import LiveObject
from terrifi_gen.rendering import WriteError


@pytest.fixture
def controller_env(clean_env):
    """Environment pointing at a controller with an API key."""
    clean_env.setenv("UNIFI_API", "https://unifi.local")
    clean_env.setenv("UNIFI_API_KEY", "secret-key")
    return clean_env


@pytest.fixture
def mock_client(mocker):
    """Replace the controller client used by the CLI."""
    client_cls = mocker.patch("terrifi_gen.cli.ControllerClient")
    return client_cls.return_value


def write_dump(tmp_path, data):
    path = tmp_path / "dump.json"
    path.write_text(json.dumps(data))
    return str(path)


# =============================================================================
# Tests for generate-imports
# =============================================================================


class TestGenerateImports:
    """Test cases for the generate-imports subcommand."""

    def test_from_dump(self, tmp_path, capsys, clean_env):
        """Blocks from a dump file are written to stdout."""
        dump = write_dump(tmp_path, [
            {"_id": "r1", "key": "nas.home", "value": "10.0.0.1", "record_type": "A"},
            {"_id": "r2", "key": "nas.home", "value": "10.0.0.2", "record_type": "A"},
        ])
        assert main(["generate-imports", "terrifi_dns_record", "--input", dump]) == 0
        out = capsys.readouterr().out
        assert out.count("import {") == 2
        assert "to = terrifi_dns_record.nas_home\n" in out
        assert "to = terrifi_dns_record.nas_home_2\n" in out
        assert out.endswith("}\n")

    def test_dump_with_sites(self, tmp_path, capsys, clean_env):
        """Objects from other sites get site-qualified import IDs."""
        dump = write_dump(tmp_path, {"default": [{"_id": "g1", "name": "A"}], "branch": [{"_id": "g2", "name": "B"}]})
        assert main(["generate-imports", "terrifi_client_group", "--input", dump]) == 0
        out = capsys.readouterr().out
        assert 'id = "g1"' in out
        assert 'id = "branch:g2"' in out

    def test_empty_result(self, tmp_path, capsys, clean_env):
        """No objects is not an error, but is reported on stderr."""
        dump = write_dump(tmp_path, [])
        assert main(["generate-imports", "terrifi_wlan", "--input", dump]) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "No terrifi_wlan resources found." in captured.err

    def test_all_objects_skipped(self, tmp_path, capsys, clean_env):
        """A batch where every object is skipped counts as empty."""
        dump = write_dump(tmp_path, [{"_id": "c1", "name": "No MAC"}])
        assert main(["generate-imports", "terrifi_client_device", "--input", dump]) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "No terrifi_client_device resources found." in captured.err

    def test_unknown_type(self, capsys, clean_env):
        """Unknown resource types are rejected before anything is fetched."""
        with pytest.raises(SystemExit) as exc:
            main(["generate-imports", "terrifi_vpn"])
        assert exc.value.code == 2
        assert "terrifi_vpn" in capsys.readouterr().err

    def test_missing_dump(self, tmp_path, capsys, clean_env):
        """An unreadable dump file is reported."""
        assert main(["generate-imports", "terrifi_wlan", "--input", str(tmp_path / "missing.json")]) == 1
        assert "missing.json" in capsys.readouterr().err

    def test_malformed_dump_entry(self, tmp_path, capsys, clean_env):
        """Non-object entries in a dump are reported, not raised."""
        dump = write_dump(tmp_path, [{"_id": "r1", "key": "nas.home", "value": "10.0.0.1"}, "junk"])
        assert main(["generate-imports", "terrifi_dns_record", "--input", dump]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "is not an object" in captured.err

    def test_from_controller(self, capsys, controller_env, mock_client):
        """Without --input, objects are listed from the controller."""
        mock_client.list_live_objects.return_value = [
            LiveObject.from_api({"_id": "z1", "name": "LAN"}, "default"),
        ]
        assert main(["generate-imports", "terrifi_firewall_zone"]) == 0
        mock_client.connect.assert_called_once()
        mock_client.list_live_objects.assert_called_once_with("firewall_zone", "default")
        assert 'resource "terrifi_firewall_zone" "lan" {' in capsys.readouterr().out

    def test_site_option(self, controller_env, mock_client):
        """--site overrides the site objects are listed from."""
        mock_client.list_live_objects.return_value = []
        assert main(["generate-imports", "terrifi_wlan", "--site", "branch"]) == 0
        mock_client.list_live_objects.assert_called_once_with("wlan", "branch")

    def test_controller_error(self, capsys, controller_env, mock_client):
        """Listing failures exit non-zero with a message."""
        mock_client.list_live_objects.side_effect = ControllerError("connection refused")
        assert main(["generate-imports", "terrifi_network"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "connection refused" in captured.err

    def test_missing_configuration(self, capsys, clean_env):
        """Missing UNIFI_API is reported without a traceback."""
        assert main(["generate-imports", "terrifi_network"]) == 1
        assert "UNIFI_API" in capsys.readouterr().err

    def test_write_error(self, mocker, tmp_path, capsys, clean_env):
        """Sink failures exit non-zero."""
        mocker.patch("terrifi_gen.cli.write_blocks", side_effect=WriteError("broken pipe"))
        dump = write_dump(tmp_path, [{"_id": "g1", "name": "A"}])
        assert main(["generate-imports", "terrifi_client_group", "--input", dump]) == 1
        assert "broken pipe" in capsys.readouterr().err


# =============================================================================
# Tests for check-connection and list-types
# =============================================================================


class TestOtherCommands:
    """Test cases for the check-connection and list-types subcommands."""

    def test_check_connection(self, capsys, controller_env, mock_client):
        """Successful checks print URL, auth kind and sites."""
        mock_client.list_sites.return_value = ["default", "branch"]
        assert main(["check-connection"]) == 0
        out = capsys.readouterr().out
        assert "Connection successful (https://unifi.local)" in out
        assert "Auth: API key" in out
        assert "Sites: default, branch" in out

    def test_check_connection_failure(self, capsys, controller_env, mock_client):
        """Connection failures exit non-zero."""
        mock_client.connect.side_effect = ControllerError("login returned status 401")
        assert main(["check-connection"]) == 1
        assert "connection failed: login returned status 401" in capsys.readouterr().err

    def test_check_connection_sites_failure(self, capsys, controller_env, mock_client):
        """Site listing failures are reported separately."""
        mock_client.list_sites.side_effect = ControllerError("403")
        assert main(["check-connection"]) == 1
        assert "could not list sites" in capsys.readouterr().err

    def test_list_types(self, capsys, clean_env):
        """Every supported type is listed with its description."""
        assert main(["list-types"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 7
        assert lines[0].startswith("terrifi_client_device")
        assert any("Wireless networks" in line for line in lines)

    def test_requires_command(self, clean_env):
        """A subcommand is required."""
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 2
