"""
Unit tests for data model validation.
"""

from datetime import datetime

import pytest

from hostkit.models import (
    Branch,
    BranchesConfig,
    Configuration,
    Device,
    DownloadsConfig,
    DuplicateGroup,
    FileFingerprint,
    HistoryEntry,
    LastCommit,
    NetworkConfig,
    PortEntry,
    PortsConfig,
    RepositoryBranchReport,
    RepositoryStatus,
    ScanRange,
    SortedFile,
)


def make_branch(name: str = "feature", **overrides) -> Branch:
    values = {
        "name": name,
        "is_current": False,
        "is_merged": False,
        "is_protected": False,
        "last_commit": LastCommit(date="2024-01-01 12:00:00 +0000", author="Dev", subject="work"),
    }
    values.update(overrides)
    return Branch(**values)


class TestBranch:
    """Test Branch validation."""

    def test_valid_branch(self):
        assert make_branch(ahead=2, behind=1).validate() is True

    def test_empty_name(self):
        with pytest.raises(ValueError, match="name cannot be empty"):
            make_branch("  ").validate()

    def test_negative_counts(self):
        with pytest.raises(ValueError):
            make_branch(ahead=-1).validate()

    def test_current_branch_must_be_protected(self):
        with pytest.raises(ValueError, match="protected"):
            make_branch(is_current=True).validate()

        assert make_branch(is_current=True, is_protected=True).validate() is True


class TestRepositoryBranchReport:
    def test_valid_report(self):
        report = RepositoryBranchReport(
            repo_path="/code/app",
            repo_name="app",
            current_branch="main",
            branches=[make_branch("main", is_current=True, is_protected=True), make_branch()],
        )

        assert report.validate() is True
        assert "error" not in report.to_dict()
        assert report.to_dict()["branches"][1]["last_commit"]["author"] == "Dev"

    def test_duplicate_names(self):
        report = RepositoryBranchReport(
            repo_path="/code/app",
            repo_name="app",
            current_branch="main",
            branches=[make_branch("x"), make_branch("x")],
        )

        with pytest.raises(ValueError, match="unique"):
            report.validate()

    def test_failed_report_has_no_branches(self):
        report = RepositoryBranchReport(
            repo_path="/code/app",
            repo_name="app",
            current_branch="unknown",
            branches=[make_branch()],
            error="not a git repository",
        )

        with pytest.raises(ValueError):
            report.validate()

    def test_with_branches(self):
        report = RepositoryBranchReport("/code/app", "app", "main", [make_branch("a"), make_branch("b")])

        filtered = report.with_branches([report.branches[1]])

        assert [b.name for b in filtered.branches] == ["b"]
        assert len(report.branches) == 2

    def test_status_omits_unset_fields(self):
        status = RepositoryStatus(repo_path="/x", repo_name="x", error="boom")

        assert status.to_dict() == {"repo_path": "/x", "repo_name": "x", "error": "boom"}


class TestFileModels:
    def test_fingerprint(self):
        assert FileFingerprint(path="/a", hash="0" * 64, size=1).validate() is True

        with pytest.raises(ValueError):
            FileFingerprint(path="/a", hash="abc", size=1).validate()

    def test_duplicate_group_needs_two_files(self):
        with pytest.raises(ValueError):
            DuplicateGroup(hash="0" * 64, files=["/a"], size=1).validate()

        assert DuplicateGroup(hash="0" * 64, files=["/a", "/b"], size=1).count == 2

    def test_history_entry_round_trip(self):
        entry = HistoryEntry(
            filename="a.pdf",
            original_path="/in/a.pdf",
            sorted_path="/out/documents/a.pdf",
            category="documents",
            size=10,
        )

        restored = HistoryEntry.from_dict(entry.to_dict())

        assert restored == entry
        assert restored.validate() is True

    def test_history_entry_from_sparse_dict(self):
        entry = HistoryEntry.from_dict({"filename": "x"})

        assert entry.category == "other"
        assert entry.hash is None
        assert entry.timestamp

    def test_sorted_file_serializes_timestamp(self):
        modified = datetime(2024, 5, 1, 8, 30)
        data = SortedFile("a.png", "/s/images/a.png", "images", 3, modified).to_dict()

        assert data["modified"] == "2024-05-01T08:30:00"


class TestNetworkAndPortModels:
    def test_device_mac_format(self):
        assert Device(mac="aa:bb:cc:dd:ee:ff", ip="10.0.0.2").validate() is True

        with pytest.raises(ValueError):
            Device(mac="AA-BB-CC-DD-EE-FF", ip="10.0.0.2").validate()

    def test_device_from_dict_defaults(self):
        device = Device.from_dict({"mac": "aa:bb:cc:dd:ee:ff", "vendor": None})

        assert device.vendor == "Unknown"
        assert device.is_new is False

    def test_port_entry(self):
        assert PortEntry(port=80, pid=1, process="nginx").validate() is True

        with pytest.raises(ValueError):
            PortEntry(port=70000, pid=1, process="x").validate()
        with pytest.raises(ValueError):
            PortEntry(port=80, pid=-1, process="x").validate()


class TestConfiguration:
    def test_defaults_are_valid(self):
        assert Configuration().validate() is True

    def test_distinct_tool_ports(self):
        config = Configuration(branches=BranchesConfig(port=3001))

        with pytest.raises(ValueError, match="distinct"):
            config.validate()

    def test_network_interval_minimum(self):
        with pytest.raises(ValueError, match="at least 10"):
            NetworkConfig(scan_interval=9).validate()

    def test_downloads_stability_threshold(self):
        with pytest.raises(ValueError):
            DownloadsConfig(stability_threshold_ms=-1).validate()

    def test_scan_range_bounds(self):
        assert ScanRange("ok", 1, 65535).validate() is True

        with pytest.raises(ValueError):
            PortsConfig(scan_ranges=[ScanRange("bad", 0, 10)]).validate()

    def test_protected_branch_names(self):
        with pytest.raises(ValueError):
            BranchesConfig(protected_branches=["main", ""]).validate()
