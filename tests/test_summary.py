"""Test processing summary counters"""

from archive_threads import ProcessingSummary


class TestProcessingSummary:
    """Test ProcessingSummary dataclass"""

    def test_merge_adds_counts(self):
        """Test merging sums every counter"""
        first = ProcessingSummary(posts_received=3, malformed_posts=1)
        second = ProcessingSummary(posts_received=2, cyclic_chains=2)

        merged = first + second

        assert merged.posts_received == 5
        assert merged.malformed_posts == 1
        assert merged.cyclic_chains == 2
        # Inputs are untouched
        assert first.posts_received == 3

    def test_skipped_records(self):
        """Test skipped records cover posts and messages"""
        summary = ProcessingSummary(malformed_posts=2, malformed_messages=1)
        assert summary.skipped_records == 3
        assert summary.has_anomalies

    def test_no_anomalies(self):
        """Test exclusions alone are not anomalies"""
        summary = ProcessingSummary(posts_received=10, excluded_posts=4, excluded_reposts=1)
        assert not summary.has_anomalies

    def test_to_dict(self):
        """Test all counters are serialized"""
        data = ProcessingSummary(orphaned_roots=1).to_dict()

        assert data["orphaned_roots"] == 1
        assert data["degraded_threads"] == 0
        assert len(data) == 11
