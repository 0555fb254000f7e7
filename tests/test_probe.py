"""
Tests for the environment probe — distro detection, required binaries,
network gate, virtualization.

check_network is patched; no network.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from kubeconsole.core.errors import EnvironmentProbeError
from kubeconsole.core.models.action import Receipt
from kubeconsole.core.services.probe import detect_distro, detect_virtualization, probe, read_os_release

_NETWORK = "kubeconsole.core.services.probe.check_network"


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "os-release-custom"
    path.write_text(text)
    return path


class TestDetectDistro:
    def test_ubuntu(self, os_release):
        distro = detect_distro(os_release)
        assert distro.id == "ubuntu"
        assert distro.family == "debian"
        assert distro.pretty_name == "Ubuntu 22.04.4 LTS"
        assert distro.supported

    @pytest.mark.parametrize("distro_id,family", [
        ("debian", "debian"),
        ("fedora", "rhel"),
        ("centos", "rhel"),
        ("arch", "arch"),
    ])
    def test_known_families(self, tmp_path, distro_id, family):
        assert detect_distro(_write(tmp_path, f"ID={distro_id}\n")).family == family

    def test_id_like_fallback(self, tmp_path):
        distro = detect_distro(_write(tmp_path, 'ID=linuxmint\nID_LIKE="ubuntu debian"\n'))
        assert distro.family == "debian"

    def test_unknown_family_is_not_fatal(self, tmp_path):
        distro = detect_distro(_write(tmp_path, "ID=gentoo\n"))
        assert distro.family == "unknown"
        assert not distro.supported

    def test_missing_file(self, tmp_path):
        with pytest.raises(EnvironmentProbeError) as exc:
            detect_distro(tmp_path / "nope")
        assert exc.value.reason == "distro-undetectable"

    def test_no_id(self, tmp_path):
        with pytest.raises(EnvironmentProbeError) as exc:
            detect_distro(_write(tmp_path, 'NAME="Mystery"\n'))
        assert exc.value.reason == "distro-undetectable"

    def test_read_os_release_skips_comments(self, tmp_path):
        values = read_os_release(_write(tmp_path, "# comment\n\nID='arch'\nBUILD_ID=rolling\n"))
        assert values == {"ID": "arch", "BUILD_ID": "rolling"}


class TestDetectVirtualization:
    def test_unavailable(self, session):
        assert detect_virtualization(session) == "unknown"

    def test_virtualized(self, session, runner):
        runner.binaries.add("systemd-detect-virt")
        runner.set_response(["systemd-detect-virt"], Receipt.success([], output="kvm\n"))
        assert detect_virtualization(session) == "kvm"

    def test_bare_metal(self, session, runner):
        runner.binaries.add("systemd-detect-virt")
        runner.set_response(
            ["systemd-detect-virt"],
            Receipt.failure([], error="", output="none", return_code=1),
        )
        assert detect_virtualization(session) == "none"


class TestProbe:
    @patch(_NETWORK, return_value=True)
    def test_success(self, _net, session):
        session.distro = None
        report = probe(session)

        assert session.report is report
        assert session.distro.id == "ubuntu"
        assert report.network_ok
        assert report.virtualization == "unknown"
        assert report.missing_binaries == []
        messages = [e.message for e in session.audit.entries()]
        assert messages[0] == "Detected distribution: ubuntu (debian)"
        assert "All required dependencies are present." in messages

    @patch(_NETWORK, return_value=False)
    def test_network_unreachable_is_fatal(self, _net, session):
        with pytest.raises(EnvironmentProbeError) as exc:
            probe(session)
        assert exc.value.reason == "network-unreachable"
        assert session.report is None
        last = session.audit.entries()[-1]
        assert last.level == "error"
        assert "Network connectivity is required" in last.message

    @patch(_NETWORK, return_value=True)
    def test_missing_binary_reported(self, _net, session, runner):
        runner.binaries.discard("docker")
        report = probe(session)
        assert report.missing_binaries == ["docker"]
        errors = [e.message for e in session.audit.entries() if e.level == "error"]
        assert errors == ["docker is required but not installed. Please install it first."]

    @patch(_NETWORK, return_value=True)
    def test_missing_binary_strict(self, _net, session, runner):
        runner.binaries.discard("docker")
        with pytest.raises(EnvironmentProbeError) as exc:
            probe(session, strict=True)
        assert exc.value.reason == "missing-dependencies"
        _net.assert_not_called()

    @patch(_NETWORK, return_value=True)
    def test_undetectable_distro(self, _net, session, tmp_path):
        session.config.os_release_path = str(tmp_path / "missing")
        with pytest.raises(EnvironmentProbeError) as exc:
            probe(session)
        assert exc.value.reason == "distro-undetectable"
        _net.assert_not_called()

    @patch(_NETWORK, return_value=True)
    def test_report_serializes(self, _net, session):
        data = probe(session).to_dict()
        assert data["distro"]["family"] == "debian"
        assert data["binaries"]["curl"] == "/usr/local/bin/curl"
        assert data["missing_binaries"] == []
