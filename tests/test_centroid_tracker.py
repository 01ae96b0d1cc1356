"""
Tests for CentroidTracker: frame updates, cleanup and target selection.
"""

import logging

import numpy as np
import pytest

from weed_tracker import CentroidTracker, Detection, TrackerConfig


def det(x, y=0.0, z=0.0, size=1.0):
    return Detection.from_xyz(x, y, z, size=size)


@pytest.fixture
def tracker():
    return CentroidTracker(distance_tolerance=1.0, max_disappeared_frames=2, min_valid_frame_count=2)


class TestConstruction:
    """Tests for constructor validation and from_config."""

    def test_from_config(self):
        config = TrackerConfig(distance_tolerance=7.0, max_disappeared_frames=4, min_valid_frame_count=1)
        tracker = CentroidTracker.from_config(config)
        assert tracker.distance_tolerance == 7.0
        assert tracker.max_disappeared_frames == 4
        assert tracker.min_valid_frame_count == 1
        assert tracker.count() == 0

    def test_rejects_non_positive_tolerance(self):
        with pytest.raises(ValueError):
            CentroidTracker(distance_tolerance=0.0, max_disappeared_frames=1, min_valid_frame_count=1)

    def test_rejects_negative_frame_counts(self):
        with pytest.raises(ValueError):
            CentroidTracker(distance_tolerance=1.0, max_disappeared_frames=-1, min_valid_frame_count=1)
        with pytest.raises(ValueError):
            CentroidTracker(distance_tolerance=1.0, max_disappeared_frames=1, min_valid_frame_count=-1)


class TestUpdate:
    """Tests for update()."""

    def test_first_frame_registers_everything(self, tracker):
        detections = [det(0, size=2.0), det(5, size=3.0), det(10, size=1.0)]
        tracker.update(detections)

        assert tracker.count() == 3
        tracked = sorted((tuple(obj.position.tolist()), obj.size) for obj in tracker.active_objects())
        expected = sorted((tuple(d.position.tolist()), d.size) for d in detections)
        assert tracked == expected
        assert tracker.last_stats.n_new == 3

    def test_empty_update_on_empty_tracker(self, tracker):
        tracker.update([])
        assert tracker.count() == 0
        assert tracker.last_stats.n_detections == 0

    def test_consecutive_matches_build_streak(self, tracker):
        tracker.update([det(0.0)])
        object_id = tracker.top().object_id

        for k in range(2, 7):
            tracker.update([det(0.1 * k)])
            obj = tracker.get(object_id)
            assert obj.match_streak == k
            assert obj.disappeared_count == 0
        assert tracker.count() == 1

    def test_position_refreshed_on_match(self, tracker):
        tracker.update([det(0.0, size=2.0)])
        tracker.update([det(0.5, y=0.3, size=2.5)])
        obj = tracker.top()
        assert obj.position.tolist() == pytest.approx([0.5, 0.3, 0.0])
        assert obj.size == 2.5

    def test_out_of_tolerance_is_new_object(self, tracker):
        tracker.update([det(0.0)])
        tracker.update([det(1.0)])  # exactly at tolerance: not a match

        assert tracker.count() == 2
        assert tracker.last_stats.n_matched == 0
        assert tracker.last_stats.n_missed == 1
        assert tracker.last_stats.n_new == 1
        old = tracker.get(1)
        assert old.match_streak == 0
        assert old.disappeared_count == 1

    def test_new_detection_alongside_match(self, tracker):
        tracker.update([det(0.0)])
        tracker.update([det(20.0), det(0.2)])

        assert tracker.count() == 2
        assert tracker.get(1).match_streak == 2
        assert tracker.get(2).match_streak == 1
        assert tracker.get(2).position[0] == 20.0

    def test_tracks_follow_crossing_drift(self, tracker):
        tracker.update([det(0.0), det(3.0)])
        ids_by_x = {float(o.position[0]): o.object_id for o in tracker.active_objects()}

        # Input order shuffled, both drift right
        tracker.update([det(3.4), det(0.4)])

        assert tracker.get(ids_by_x[0.0]).position[0] == pytest.approx(0.4)
        assert tracker.get(ids_by_x[3.0]).position[0] == pytest.approx(3.4)

    def test_removed_after_exceeding_max_disappeared(self, tracker):
        tracker.update([det(0.0)])
        tracker.update([])
        tracker.update([])
        assert tracker.count() == 1

        tracker.update([])
        assert tracker.count() == 0
        assert tracker.last_stats.removed_ids == [1]
        assert tracker.get(1) is None

    def test_miss_with_other_detections_counts(self, tracker):
        tracker.update([det(0.0)])
        for _ in range(3):
            tracker.update([det(50.0)])

        ids = [obj.object_id for obj in tracker.active_objects()]
        assert 1 not in ids
        assert ids == [2]

    def test_removed_id_never_returns(self, tracker):
        tracker.update([det(0.0)])
        for _ in range(3):
            tracker.update([])
        tracker.update([det(0.0)])

        assert tracker.count() == 1
        assert tracker.top().object_id == 2

    def test_active_objects_always_ranked(self, tracker):
        rng = np.random.default_rng(7)
        for _ in range(30):
            n = int(rng.integers(0, 6))
            detections = [
                det(float(x), float(y), size=float(s))
                for x, y, s in zip(rng.uniform(0, 5, n), rng.uniform(0, 5, n), rng.uniform(1, 10, n))
            ]
            tracker.update(detections)

            sizes = [obj.size for obj in tracker.active_objects()]
            assert sizes == sorted(sizes, reverse=True)
            assert len(sizes) == tracker.count()

    def test_lifecycle_rank_key_stays_sorted(self):
        # Rank by fewest missed frames
        tracker = CentroidTracker(
            distance_tolerance=1.0, max_disappeared_frames=5, min_valid_frame_count=2,
            rank_key=lambda obj: -obj.disappeared_count,
        )
        tracker.update([det(0.0), det(10.0)])
        tracker.update([det(0.0)])

        ranks = [-obj.disappeared_count for obj in tracker.active_objects()]
        assert ranks == sorted(ranks, reverse=True)
        assert tracker.top().object_id == 1

    def test_debug_summary_logged(self, tracker, caplog):
        with caplog.at_level(logging.DEBUG, logger="weed_tracker"):
            tracker.update([det(0.0)])
        assert "registering all objects" in caplog.text
        assert "Tracking (x,y,z,size)" in caplog.text


class TestQueries:
    """Tests for top(), active_objects() and count()."""

    def test_top_empty(self, tracker):
        assert tracker.top() is None
        assert tracker.top_valid() is None

    def test_top_is_biggest(self, tracker):
        tracker.update([det(0.0, size=2.0), det(5.0, size=8.0), det(10.0, size=4.0)])
        assert tracker.top().size == 8.0

    def test_reads_are_pure(self, tracker):
        tracker.update([det(0.0, size=2.0), det(5.0, size=8.0)])
        before = [(o.object_id, o.match_streak, o.claimed) for o in tracker.active_objects()]

        tracker.top()
        tracker.count()
        tracker.active_objects()

        after = [(o.object_id, o.match_streak, o.claimed) for o in tracker.active_objects()]
        assert before == after

    def test_returned_objects_are_copies(self, tracker):
        tracker.update([det(0.0)])
        obj = tracker.top()
        obj.position[0] = 100.0
        obj.claimed = True

        fresh = tracker.top()
        assert fresh.position[0] == 0.0
        assert fresh.claimed is False

    def test_len(self, tracker):
        tracker.update([det(0.0), det(5.0)])
        assert len(tracker) == 2


class TestTopValid:
    """Tests for top_valid() target hand-out."""

    def test_requires_min_frames(self, tracker):
        tracker.update([det(0.0)])
        assert tracker.top_valid() is None

        tracker.update([det(0.1)])
        target = tracker.top_valid()
        assert target is not None
        assert target.object_id == 1
        assert target.claimed is True

    def test_each_object_handed_out_once(self, tracker):
        tracker.update([det(0.0), det(5.0), det(10.0)])
        tracker.update([det(0.0), det(5.0), det(10.0)])

        handed_out = []
        while True:
            target = tracker.top_valid()
            if target is None:
                break
            handed_out.append(target.object_id)

        assert sorted(handed_out) == [1, 2, 3]
        assert tracker.top_valid() is None

        # Still claimed after more matches
        tracker.update([det(0.0), det(5.0), det(10.0)])
        assert tracker.top_valid() is None

    def test_scans_registration_order(self, tracker):
        tracker.update([det(0.0, size=1.0)])
        tracker.update([det(0.0, size=1.0), det(5.0, size=9.0)])
        tracker.update([det(0.0, size=1.0), det(5.0, size=9.0)])

        # Object 2 ranks first but object 1 was registered first
        assert tracker.top().object_id == 2
        assert tracker.top_valid().object_id == 1
        assert tracker.top_valid().object_id == 2

    def test_missed_object_not_eligible(self, tracker):
        tracker.update([det(0.0)])
        tracker.update([det(0.0)])
        tracker.update([])
        assert tracker.top_valid() is None

    def test_zero_min_frames_accepts_missing(self):
        tracker = CentroidTracker(distance_tolerance=1.0, max_disappeared_frames=3, min_valid_frame_count=0)
        tracker.update([det(0.0)])
        tracker.update([])
        assert tracker.top_valid().object_id == 1

    def test_claim_survives_in_active_objects(self, tracker):
        tracker.update([det(0.0)])
        tracker.update([det(0.0)])
        tracker.top_valid()
        assert tracker.active_objects()[0].claimed is True


class TestScenario:
    """Frame-by-frame walk through register, match, claim, disappear."""

    def test_full_lifecycle(self, tracker):
        # Frame 1
        tracker.update([det(0.0, size=5.0)])
        obj = tracker.top()
        assert obj.object_id == 1
        assert obj.match_streak == 1

        # Frame 2
        tracker.update([det(0.1, size=5.0)])
        assert tracker.get(1).match_streak == 2

        target = tracker.top_valid()
        assert target.object_id == 1
        assert tracker.get(1).claimed is True

        # Frame 3
        tracker.update([])
        obj = tracker.get(1)
        assert obj.disappeared_count == 1
        assert obj.match_streak == 0

        # Frame 4
        tracker.update([])
        assert tracker.get(1).disappeared_count == 2
        assert tracker.count() == 1

        # Frame 5
        tracker.update([])
        assert tracker.count() == 0


class TestReset:
    """Tests for reset()."""

    def test_reset_clears_but_keeps_ids(self, tracker):
        tracker.update([det(0.0), det(5.0)])
        tracker.reset()

        assert tracker.count() == 0
        assert tracker.top() is None

        tracker.update([det(0.0)])
        assert tracker.top().object_id == 3
