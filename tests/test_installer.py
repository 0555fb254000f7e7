"""
Tests for the dependency installer — presence checks, install paths,
version resolution and the unsupported-distro guard.

fetch_latest_version is patched everywhere; no network.
"""

from unittest.mock import MagicMock, patch

import pytest

from kubeconsole.core.config.loader import ToolOverride
from kubeconsole.core.context import SessionState
from kubeconsole.core.errors import InstallError
from kubeconsole.core.models.environment import DistroProfile
from kubeconsole.core.services import installer
from kubeconsole.core.services.installer import (
    ensure_installed,
    fetch_latest_version,
    locate,
    resolve_version,
    tool_status,
    uninstall,
    update_tools,
)

_FETCH = "kubeconsole.core.services.installer.fetch_latest_version"


def _gentoo(session: SessionState) -> None:
    session.distro = DistroProfile(id="gentoo", family="unknown")


# ═══════════════════════════════════════════════════════════════════
#  Version resolution
# ═══════════════════════════════════════════════════════════════════


class TestFetchLatestVersion:
    @patch("kubeconsole.core.services.installer.urllib.request.urlopen")
    def test_reads_first_line(self, mock_urlopen):
        resp = MagicMock()
        resp.read.return_value = b"v1.31.2\n"
        mock_urlopen.return_value.__enter__.return_value = resp
        assert fetch_latest_version("https://example.invalid/stable.txt") == "v1.31.2"

    @patch("kubeconsole.core.services.installer.urllib.request.urlopen")
    def test_unreachable(self, mock_urlopen):
        mock_urlopen.side_effect = OSError("no route to host")
        with pytest.raises(InstallError) as exc:
            fetch_latest_version("https://example.invalid/stable.txt")
        assert exc.value.reason == "version-resolution-failed"

    @patch("kubeconsole.core.services.installer.urllib.request.urlopen")
    def test_garbage_body(self, mock_urlopen):
        resp = MagicMock()
        resp.read.return_value = b"<html>error page</html>"
        mock_urlopen.return_value.__enter__.return_value = resp
        with pytest.raises(InstallError):
            fetch_latest_version("https://example.invalid/stable.txt")


class TestResolveVersion:
    def test_resolved_once_per_session(self, session):
        tool = session.tool("kubectl")
        with patch(_FETCH, return_value="v1.30.0") as fetch:
            assert resolve_version(tool, session) == "v1.30.0"
            assert resolve_version(tool, session) == "v1.30.0"
        assert fetch.call_count == 1
        assert session.versions["kubectl"] == "v1.30.0"
        assert session.audit.entries()[-1].message == "Resolved kubectl version v1.30.0"

    def test_refresh_queries_again(self, session):
        tool = session.tool("kubectl")
        with patch(_FETCH, side_effect=["v1.30.0", "v1.31.0"]) as fetch:
            resolve_version(tool, session)
            assert resolve_version(tool, session, refresh=True) == "v1.31.0"
        assert fetch.call_count == 2

    def test_pinned_version_wins(self, config, runner, audit):
        config.tools["kubectl"] = ToolOverride(version="v1.29.3")
        session = SessionState.create(config, runner, audit=audit)
        with patch(_FETCH) as fetch:
            assert resolve_version(session.tool("kubectl"), session) == "v1.29.3"
        fetch.assert_not_called()

    def test_minikube_uses_latest_token(self, session):
        with patch(_FETCH) as fetch:
            assert resolve_version(session.tool("minikube"), session) == "latest"
        fetch.assert_not_called()


# ═══════════════════════════════════════════════════════════════════
#  ensure_installed
# ═══════════════════════════════════════════════════════════════════


class TestEnsureInstalled:
    def test_already_present_makes_no_calls(self, session, runner):
        result = ensure_installed(session.tool("curl"), session)
        assert result.status == "already_present"
        assert result.path == "/usr/local/bin/curl"
        assert runner.call_count == 0
        assert session.audit.entries()[-1].message == "curl is already installed."

    def test_package_install_on_debian(self, session, runner):
        runner.binaries.discard("curl")
        result = ensure_installed(session.tool("curl"), session)

        assert result.status == "installed"
        assert runner.commands() == ["apt-get update", "apt-get install -y curl"]
        assert all(call.sudo for call in runner.call_log)

    @pytest.mark.parametrize("distro_id,family,expected", [
        ("fedora", "rhel", "yum install -y curl"),
        ("arch", "arch", "pacman -Syu --noconfirm curl"),
    ])
    def test_package_install_per_family(self, session, runner, distro_id, family, expected):
        session.distro = DistroProfile(id=distro_id, family=family)
        runner.binaries.discard("curl")
        ensure_installed(session.tool("curl"), session)
        assert runner.commands() == [expected]

    def test_binary_install(self, session, runner):
        with patch(_FETCH, return_value="v1.31.0"):
            result = ensure_installed(session.tool("kubectl"), session)

        assert result.status == "installed"
        assert result.version == "v1.31.0"
        assert result.path == "/usr/local/bin/kubectl"
        download, place, cleanup = runner.call_log
        assert download.argv[:4] == ["curl", "-fsSL", "-o", "/tmp/kubeconsole-kubectl"]
        assert download.argv[4].startswith("https://dl.k8s.io/release/v1.31.0/bin/")
        assert download.argv[4].endswith("/kubectl")
        assert place.sudo
        assert place.argv[-2:] == ["/tmp/kubeconsole-kubectl", "/usr/local/bin/kubectl"]
        assert cleanup.argv == ["rm", "-f", "/tmp/kubeconsole-kubectl"]

    def test_idempotent(self, session, runner):
        with patch(_FETCH, return_value="v1.31.0"):
            first = ensure_installed(session.tool("kubectl"), session)
            calls = runner.call_count
            second = ensure_installed(session.tool("kubectl"), session)

        assert first.status == "installed"
        assert second.status == "already_present"
        assert runner.call_count == calls

    def test_unsupported_distro_never_calls_package_manager(self, session, runner):
        _gentoo(session)
        runner.binaries.discard("curl")
        with pytest.raises(InstallError) as exc:
            ensure_installed(session.tool("curl"), session)

        assert exc.value.reason == "unsupported-distro"
        assert runner.call_count == 0
        assert session.audit.entries()[-1].level == "error"

    def test_unsupported_distro_blocks_binary_tools(self, session, runner):
        _gentoo(session)
        with patch(_FETCH) as fetch, pytest.raises(InstallError) as exc:
            ensure_installed(session.tool("kubectl"), session)
        assert exc.value.reason == "unsupported-distro"
        fetch.assert_not_called()
        assert runner.call_count == 0

    def test_version_resolution_failure(self, session, runner):
        failure = InstallError("version-resolution-failed", "offline")
        with patch(_FETCH, side_effect=failure), pytest.raises(InstallError) as exc:
            ensure_installed(session.tool("kubectl"), session)
        assert exc.value.reason == "version-resolution-failed"
        assert runner.call_count == 0

    def test_download_failure_stops_install(self, session, runner):
        runner.set_failure(["curl"], error="curl: (22) 404")
        with patch(_FETCH, return_value="v9.9.9"), pytest.raises(InstallError) as exc:
            ensure_installed(session.tool("kubectl"), session)

        assert exc.value.reason == "install-failed"
        assert runner.call_count == 1
        assert "kubectl" not in runner.binaries

    def test_apt_update_failure_skips_install(self, session, runner):
        runner.binaries.discard("curl")
        runner.set_failure(["apt-get", "update"], error="Temporary failure resolving")
        with pytest.raises(InstallError):
            ensure_installed(session.tool("curl"), session)
        assert runner.commands() == ["apt-get update"]


# ═══════════════════════════════════════════════════════════════════
#  uninstall / update / status
# ═══════════════════════════════════════════════════════════════════


class TestCustomInstallPath:
    """install_path outside the search path."""

    @pytest.fixture
    def opt_session(self, config, runner, audit):
        config.tools["kubectl"] = ToolOverride(install_path="/opt/k8s/bin/kubectl")
        session = SessionState.create(config, runner, audit=audit)
        session.distro = DistroProfile(id="ubuntu", id_like=["debian"], family="debian")
        return session

    def test_idempotent(self, opt_session, runner):
        tool = opt_session.tool("kubectl")
        with patch(_FETCH, return_value="v1.31.0"):
            first = ensure_installed(tool, opt_session)
            second = ensure_installed(tool, opt_session)

        assert (first.status, second.status) == ("installed", "already_present")
        assert second.path == "/opt/k8s/bin/kubectl"
        installs = [c for c in runner.commands() if c.startswith("install ")]
        assert installs == ["install -o root -g root -m 0755 /tmp/kubeconsole-kubectl /opt/k8s/bin/kubectl"]
        assert runner.which("kubectl") is None

    def test_status_reports_install_path(self, opt_session, runner):
        runner.files.add("/opt/k8s/bin/kubectl")
        assert tool_status(opt_session)["kubectl"] == "/opt/k8s/bin/kubectl"

    def test_uninstall_removes_install_path(self, opt_session, runner):
        runner.files.add("/opt/k8s/bin/kubectl")
        result = uninstall(opt_session.tool("kubectl"), opt_session)
        assert result.status == "removed"
        assert runner.commands() == ["rm -f /opt/k8s/bin/kubectl"]
        assert locate(opt_session.tool("kubectl"), opt_session) is None


class TestUninstall:
    def test_binary_removed(self, session, runner):
        runner.binaries.add("kubectl")
        result = uninstall(session.tool("kubectl"), session)

        assert result.status == "removed"
        assert runner.commands() == ["rm -f /usr/local/bin/kubectl"]
        assert runner.call_log[0].sudo
        assert "kubectl" not in runner.binaries

    def test_removes_the_copy_that_was_found(self, session, runner):
        runner.files.add("/usr/bin/kubectl")
        result = uninstall(session.tool("kubectl"), session)

        assert result.status == "removed"
        assert result.path == "/usr/bin/kubectl"
        assert runner.commands() == ["rm -f /usr/bin/kubectl"]
        assert runner.which("kubectl") is None

    def test_absent_is_not_an_error(self, session, runner):
        result = uninstall(session.tool("minikube"), session)
        assert result.status == "absent"
        assert runner.call_count == 0

    def test_package_removed(self, session, runner):
        uninstall(session.tool("curl"), session)
        assert runner.commands() == ["apt-get remove -y curl"]

    def test_failure(self, session, runner):
        runner.binaries.add("kubectl")
        runner.set_failure(["rm"], error="Permission denied")
        with pytest.raises(InstallError) as exc:
            uninstall(session.tool("kubectl"), session)
        assert exc.value.reason == "uninstall-failed"

    def test_clears_cached_version(self, session, runner):
        runner.binaries.add("kubectl")
        session.versions["kubectl"] = "v1.30.0"
        uninstall(session.tool("kubectl"), session)
        assert "kubectl" not in session.versions


class TestUpdateTools:
    def test_reinstalls_even_when_present(self, session, runner):
        runner.binaries.update({"kubectl", "minikube"})
        session.versions["kubectl"] = "v1.29.0"
        with patch(_FETCH, return_value="v1.31.0"):
            results = update_tools(session)

        assert [r.tool for r in results] == ["kubectl", "minikube"]
        assert all(r.status == "installed" for r in results)
        assert session.versions["kubectl"] == "v1.31.0"
        installs = [c for c in runner.commands() if c.startswith("install ")]
        assert len(installs) == 2

    def test_unknown_tool(self, session):
        with pytest.raises(InstallError) as exc:
            update_tools(session, ("helm",))
        assert exc.value.reason == "unknown-tool"


class TestToolStatus:
    def test_reports_every_tool(self, session, runner):
        runner.binaries.add("minikube")
        status = tool_status(session)
        assert status == {
            "curl": "/usr/local/bin/curl",
            "kubectl": None,
            "minikube": "/usr/local/bin/minikube",
        }

    def test_updatable_tools(self):
        assert installer.UPDATABLE_TOOLS == ("kubectl", "minikube")
