"""
Tests for the port resolver: listing parsers, the scanner, preferences and
conflict detection.
"""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import psutil
import pytest

from conftest import completed
from hostkit.components.port_parsers import (
    parse_lsof,
    parse_netstat_unix,
    parse_netstat_windows,
    parse_ss,
    parse_unix_output,
)
from hostkit.components.port_scanner import PortScanner, filter_range, find_conflicts
from hostkit.models.ports import PortEntry
from hostkit.services.preference_store import PreferenceStore

LSOF = """\
COMMAND   PID  USER   FD   TYPE DEVICE SIZE/OFF NODE NAME
node    41234 alice   23u  IPv6 0x1234      0t0  TCP *:3000 (LISTEN)
node    41234 alice   24u  IPv4 0x1235      0t0  TCP 127.0.0.1:3000 (LISTEN)
postgres  812 alice    7u  IPv4 0x2222      0t0  TCP 127.0.0.1:5432 (LISTEN)
"""

NETSTAT_UNIX = """\
Active Internet connections (only servers)
Proto Recv-Q Send-Q Local Address           Foreign Address         State       PID/Program name
tcp        0      0 0.0.0.0:8080            0.0.0.0:*               LISTEN      2201/python3
tcp6       0      0 :::22                   :::*                    LISTEN      901/sshd
"""

SS = """\
State  Recv-Q Send-Q Local Address:Port  Peer Address:Port Process
LISTEN 0      511          0.0.0.0:80         0.0.0.0:*     users:(("nginx",pid=1500,fd=6))
LISTEN 0      128        127.0.0.1:6379       0.0.0.0:*     users:(("redis-server",pid=1600,fd=7))
"""

NETSTAT_WINDOWS = """\
  Proto  Local Address          Foreign Address        State           PID
  TCP    0.0.0.0:135            0.0.0.0:0              LISTENING       1044
  TCP    0.0.0.0:445            0.0.0.0:0              LISTENING       4
  TCP    192.168.1.10:139       0.0.0.0:0              LISTENING       4
  TCP    192.168.1.10:50000     52.1.2.3:443           ESTABLISHED     7000
"""


class TestPortParsers:
    def test_lsof(self):
        entries = parse_lsof(LSOF)

        assert [(e.port, e.pid, e.process) for e in entries] == [
            (3000, 41234, "node"),
            (5432, 812, "postgres"),
        ]
        assert entries[0].user == "alice"
        assert entries[0].state == "LISTEN"

    def test_netstat_unix(self):
        entries = parse_netstat_unix(NETSTAT_UNIX)

        assert [(e.port, e.pid, e.process) for e in entries] == [
            (22, 901, "sshd"),
            (8080, 2201, "python3"),
        ]
        assert "user" not in entries[0].to_dict()

    def test_ss(self):
        entries = parse_ss(SS)

        assert [(e.port, e.pid, e.process) for e in entries] == [
            (80, 1500, "nginx"),
            (6379, 1600, "redis-server"),
        ]

    def test_unix_output_accepts_any_variant(self):
        entries = parse_unix_output(NETSTAT_UNIX + SS)

        assert [e.port for e in entries] == [22, 80, 6379, 8080]

    def test_netstat_windows(self):
        entries = parse_netstat_windows(NETSTAT_WINDOWS)

        assert [(e.port, e.pid) for e in entries] == [(135, 1044), (139, 4), (445, 4)]
        assert all(e.state == "LISTENING" and e.process == "Unknown" for e in entries)

    def test_garbage(self):
        assert parse_unix_output("nothing to see\n\n") == []


class TestFindConflicts:
    def test_only_ports_with_preferences(self):
        ports = [PortEntry(port=3000, pid=1, process="node"), PortEntry(port=22, pid=2, process="sshd")]
        preferences = {"3000": {"process": "vite", "note": "frontend"}}

        conflicts = find_conflicts(ports, preferences)

        assert len(conflicts) == 1
        data = conflicts[0].to_dict()
        assert data["port"] == 3000
        assert data["expected"] == {"process": "vite", "note": "frontend"}
        assert data["actual"]["process"] == "node"

    def test_filter_range(self):
        ports = [PortEntry(port=p, pid=p, process="x") for p in (22, 3000, 8080)]

        assert [e.port for e in filter_range(ports, 1000, 9000)] == [3000, 8080]


class TestPortScanner:
    @patch("subprocess.run")
    def test_scan_uses_lsof_first(self, mock_run: Mock):
        mock_run.return_value = completed(LSOF)
        scanner = PortScanner(platform="darwin")

        ports = scanner.scan()

        assert [p.port for p in ports] == [3000, 5432]
        assert mock_run.call_args.args[0][0] == "lsof"
        assert scanner.cached() == ports

    @patch("subprocess.run")
    def test_falls_back_through_commands(self, mock_run: Mock):
        def run(command, **kwargs):
            if command[0] == "lsof":
                raise FileNotFoundError("lsof")
            if command[0] == "netstat":
                return completed(returncode=1, stderr="netstat: command failed")
            return completed(SS)

        mock_run.side_effect = run

        ports = PortScanner(platform="linux").scan()

        assert [p.process for p in ports] == ["nginx", "redis-server"]

    @patch("subprocess.run")
    def test_failure_returns_cached(self, mock_run: Mock):
        mock_run.side_effect = FileNotFoundError("missing")
        scanner = PortScanner(platform="linux")
        previous = [PortEntry(port=1, pid=1, process="init")]
        scanner.state.complete(previous)

        assert scanner.scan() == previous
        assert scanner.state.scanning is False

    def test_scan_in_progress_returns_cached(self):
        scanner = PortScanner(platform="linux")
        previous = [PortEntry(port=1, pid=1, process="init")]
        scanner.state.complete(previous)
        scanner.state.begin()

        with patch("subprocess.run") as mock_run:
            assert scanner.scan() == previous
            mock_run.assert_not_called()

    @patch("hostkit.components.port_scanner.psutil.Process")
    @patch("subprocess.run")
    def test_windows_names_processes(self, mock_run: Mock, mock_process: Mock):
        mock_run.return_value = completed(NETSTAT_WINDOWS)
        mock_process.return_value.name.return_value = "svchost.exe"

        ports = PortScanner(platform="win32").scan()

        assert mock_run.call_args.args[0] == ["netstat", "-ano"]
        assert {p.process for p in ports} == {"svchost.exe"}

    def test_unsupported_platform(self):
        with pytest.raises(ValueError):
            PortScanner(platform="sunos5").list_listening()

    @patch("hostkit.components.port_scanner.psutil.Process")
    def test_kill_process(self, mock_process: Mock):
        result = PortScanner().kill_process(4321)

        mock_process.assert_called_once_with(4321)
        mock_process.return_value.kill.assert_called_once()
        assert result.success is True
        assert result.message == "Process 4321 killed"

    @patch("hostkit.components.port_scanner.psutil.Process")
    def test_kill_missing_process(self, mock_process: Mock):
        mock_process.side_effect = psutil.NoSuchProcess(4321)

        result = PortScanner().kill_process(4321)

        assert result.success is False
        assert result.message


class TestPreferenceStore:
    def test_empty_without_files(self, tmp_path: Path):
        assert PreferenceStore(tmp_path / "prefs.json").load() == {}

    def test_default_file_until_saved(self, tmp_path: Path):
        defaults = tmp_path / "defaults.json"
        defaults.write_text(json.dumps({"5432": {"process": "postgres"}}))
        store = PreferenceStore(tmp_path / "prefs.json", defaults)

        assert store.load() == {"5432": {"process": "postgres"}}

        store.save({"3000": {"process": "node"}})
        assert store.load() == {"3000": {"process": "node"}}

    def test_set_and_delete(self, tmp_path: Path):
        store = PreferenceStore(tmp_path / "data" / "prefs.json")

        store.set(3000, {"process": "node"})
        store.set("8080", {"process": "java"})
        assert set(store.load()) == {"3000", "8080"}

        assert store.delete(3000) is True
        assert store.delete(3000) is False
        assert set(store.load()) == {"8080"}

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "prefs.json"
        path.write_text("{broken")

        with pytest.raises(ValueError, match="Invalid JSON"):
            PreferenceStore(path).load()

    def test_save_rejects_non_object(self, tmp_path: Path):
        with pytest.raises(ValueError):
            PreferenceStore(tmp_path / "prefs.json").save(["not", "a", "dict"])
