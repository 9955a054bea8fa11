"""Unit tests for boundary-topology synthesis."""

import math

import pytest

from jumper_topology.errors import ConfigurationError
from jumper_topology.geometry import BoundingBox, Segment, point_on_segment
from jumper_topology.patterns import JumperPlacement
from jumper_topology.topology import (
    PortIdSequence,
    Region,
    build_region_port_index,
    build_topology,
    create_bridge_ports,
    create_free_space_ports,
    create_free_space_regions,
    create_jumper_ports,
    create_jumper_regions,
    lookup_region_ports,
    ports_along_segment,
    shared_boundary_segments,
    validate_port_spacing,
)


def make_pad(region_id, bounds):
    return Region(region_id, tuple(bounds.to_polygon()), bounds, bounds.center, is_pad=True)


@pytest.fixture
def pad_layout():
    """A 1x1 pad at (2..3, 0..1) enclosed by three free-space rectangles."""
    free = create_free_space_regions([
        [(0, 0), (2, 0), (2, 1), (0, 1)],
        [(3, 0), (5, 0), (5, 1), (3, 1)],
        [(0, 1), (5, 1), (5, 2), (0, 2)],
    ])
    pad = make_pad("pad", BoundingBox(2, 0, 3, 1))
    return free, pad


def on_shared_boundary(port, tolerance=1e-5):
    return any(
        point_on_segment(port.location, segment, tolerance)
        for segment in shared_boundary_segments(port.region1, port.region2)
    )


class TestPortIdSequence:
    """Tests for PortIdSequence."""

    def test_counters_per_prefix(self):
        """Test each prefix counts independently."""
        ids = PortIdSequence()
        assert [ids.next_id("tp"), ids.next_id("tp"), ids.next_id("jp"), ids.next_id("tp")] == \
            ["tp_0", "tp_1", "jp_0", "tp_2"]

    def test_sequences_are_independent(self):
        """Test two sequences never share state."""
        PortIdSequence().next_id("tp")
        assert PortIdSequence().next_id("tp") == "tp_0"


class TestRegions:
    """Tests for region construction."""

    def test_free_space_regions(self, two_rectangles):
        """Test ids, bounds and flags of free-space regions."""
        regions = create_free_space_regions(two_rectangles)
        assert [r.region_id for r in regions] == ["top_0", "top_1"]
        assert regions[1].bounds == BoundingBox(4, 0, 8, 2)
        assert regions[1].center == (6, 1)
        assert all(r.is_free_space and not r.is_bridge for r in regions)

    def test_horizontal_jumper_regions(self):
        """Test pad and bridge rectangles of a horizontal jumper."""
        jumper = JumperPlacement("j", (0, 0), "horizontal", ((-0.625, 0), (0.625, 0)))
        pad1, bridge, pad2 = create_jumper_regions([jumper], "horizontal", 0.9, 1.0)

        assert [r.region_id for r in (pad1, bridge, pad2)] == ["j_pad1", "j_bridge", "j_pad2"]
        assert pad1.is_pad and not pad1.is_through_jumper
        assert bridge.is_bridge and not bridge.is_pad
        assert pad1.bounds.min_x == pytest.approx(-1.075)
        assert pad1.bounds.max_x == pytest.approx(-0.175)
        assert pad1.bounds.height == pytest.approx(1.0)
        assert bridge.bounds.min_x == pytest.approx(-0.625)
        assert bridge.bounds.max_x == pytest.approx(0.625)
        assert bridge.bounds.height == pytest.approx(0.5)
        assert pad2.center == (0.625, 0)

    def test_vertical_jumper_regions(self):
        """Test pad axes swap for vertical jumpers."""
        jumper = JumperPlacement("j", (0, 0), "vertical", ((0, -0.625), (0, 0.625)))
        pad1, bridge, _ = create_jumper_regions([jumper], "vertical", 0.9, 1.0)
        assert pad1.bounds.width == pytest.approx(1.0)
        assert pad1.bounds.height == pytest.approx(0.9)
        assert bridge.bounds.width == pytest.approx(0.5)
        assert bridge.bounds.height == pytest.approx(1.25)


class TestPortSpacing:
    """Tests for port spacing validation and distribution."""

    @pytest.mark.parametrize("spacing", [0, -1, float('nan'), float('inf'), "0.5", None, True])
    def test_invalid_spacing(self, spacing):
        """Test invalid spacings are rejected."""
        with pytest.raises(ConfigurationError):
            validate_port_spacing(spacing)

    def test_build_topology_checks_spacing_first(self):
        """Test spacing is checked even without regions."""
        with pytest.raises(ConfigurationError):
            build_topology([], 0)

    def test_even_distribution(self):
        """Test ports are strictly interior and evenly spaced."""
        points = ports_along_segment(Segment((0, 0), (2, 0)), 0.5)
        assert points == [pytest.approx((0.5, 0)), pytest.approx((1.0, 0)), pytest.approx((1.5, 0))]

    def test_saturation(self):
        """Test a segment shorter than the spacing gets one midpoint port."""
        assert ports_along_segment(Segment((0, 0), (0.3, 0)), 1.0) == [pytest.approx((0.15, 0))]

    def test_two_intervals_give_one_port(self):
        """Test floor(L / s) - 1 ports."""
        assert len(ports_along_segment(Segment((0, 0), (2, 0)), 1.0)) == 1


class TestFreeSpacePorts:
    """Tests for free-space <-> free-space ports."""

    def test_shared_edge_ports(self, two_rectangles):
        """Test ports along the shared edge."""
        regions = create_free_space_regions(two_rectangles)
        ports = create_free_space_ports(regions, 0.5)

        assert [p.port_id for p in ports] == ["tp_0", "tp_1", "tp_2"]
        assert all(p.region1 is regions[0] and p.region2 is regions[1] for p in ports)
        assert sorted(p.y for p in ports) == pytest.approx([0.5, 1.0, 1.5])
        assert all(p.x == pytest.approx(4) for p in ports)

    def test_saturated_shared_edge(self, two_rectangles):
        """Test a large spacing still yields one port at the midpoint."""
        ports = create_free_space_ports(create_free_space_regions(two_rectangles), 5.0)
        assert len(ports) == 1
        assert ports[0].location == pytest.approx((4, 1))

    def test_density_monotonic(self, two_rectangles):
        """Test smaller spacing never yields fewer ports."""
        regions = create_free_space_regions(two_rectangles)
        counts = [len(create_free_space_ports(regions, s)) for s in (4, 2, 1, 0.7, 0.5, 0.3, 0.1)]
        assert counts == sorted(counts)
        assert counts[-1] > counts[0]

    def test_corner_contact_is_not_adjacency(self):
        """Test rectangles touching at a corner get no port."""
        regions = create_free_space_regions([
            [(0, 0), (1, 0), (1, 1), (0, 1)],
            [(1, 1), (2, 1), (2, 2), (1, 2)],
        ])
        assert create_free_space_ports(regions, 0.5) == []

    def test_sub_tolerance_overlap_ignored(self):
        """Test an overlap within the tolerance is not adjacency."""
        regions = create_free_space_regions([
            [(0, 0), (1, 0), (1, 1), (0, 1)],
            [(1, 1 - 5e-6), (2, 1 - 5e-6), (2, 2), (1, 2)],
        ])
        assert create_free_space_ports(regions, 0.5) == []

    def test_empty_polygon_skipped(self, two_rectangles):
        """Test regions without polygon data are ignored."""
        regions = create_free_space_regions(two_rectangles)
        empty = Region("empty", (), BoundingBox(0, 0, 0, 0), (0, 0))
        assert len(create_free_space_ports([empty] + regions, 0.5)) == 3

    def test_invalid_spacing(self, two_rectangles):
        """Test spacing is validated."""
        with pytest.raises(ConfigurationError):
            create_free_space_ports(create_free_space_regions(two_rectangles), -1)


class TestJumperPorts:
    """Tests for pad <-> free-space ports."""

    def test_one_port_per_touching_pair(self, pad_layout):
        """Test each touching free region gets exactly one port."""
        free, pad = pad_layout
        ports = create_jumper_ports([pad], free)

        assert [p.port_id for p in ports] == ["jp_0", "jp_1", "jp_2"]
        assert [p.region2.region_id for p in ports] == ["top_0", "top_1", "top_2"]
        assert all(p.region1 is pad for p in ports)
        assert ports[0].location == pytest.approx((2, 0.5))
        assert ports[1].location == pytest.approx((3, 0.5))
        assert ports[2].location == pytest.approx((2.5, 1))

    def test_fragmented_edge_merged(self):
        """Test collinear fragments are merged before taking the midpoint."""
        free = create_free_space_regions([[(0, 0), (2, 0), (2, 0.4), (2, 1), (0, 1)]])
        pad = make_pad("pad", BoundingBox(2, 0, 3, 1))

        assert len(shared_boundary_segments(pad, free[0])) == 2
        ports = create_jumper_ports([pad], free)
        assert len(ports) == 1
        assert ports[0].location == pytest.approx((2, 0.5))

    def test_longest_segment_wins(self):
        """Test the port sits on the longest merged shared segment."""
        # Free region wraps the pad bottom (length 1) and left side (length 2)
        free = create_free_space_regions([[(0, -1), (3, -1), (3, 0), (1, 0), (1, 2), (0, 2)]])
        pad = make_pad("pad", BoundingBox(1, 0, 2, 2))
        ports = create_jumper_ports([pad], free)
        assert len(ports) == 1
        assert ports[0].location == pytest.approx((1, 1))

    def test_untouched_pad(self, two_rectangles):
        """Test a pad away from free space gets no port."""
        pad = make_pad("pad", BoundingBox(20, 20, 21, 21))
        assert create_jumper_ports([pad], create_free_space_regions(two_rectangles)) == []


class TestBridgePorts:
    """Tests for pad <-> bridge ports."""

    def test_ports_at_intersection_center(self):
        """Test one port per pad at the center of the bounds overlap."""
        jumper = JumperPlacement("j", (0, 0), "horizontal", ((-0.625, 0), (0.625, 0)))
        pad1, bridge, pad2 = create_jumper_regions([jumper], "horizontal", 0.9, 1.0)
        ports = create_bridge_ports([pad1, pad2], [bridge])

        assert [p.port_id for p in ports] == ["jip_0", "jip_1"]
        assert [p.region_ids for p in ports] == [("j_pad1", "j_bridge"), ("j_pad2", "j_bridge")]
        assert ports[0].location == pytest.approx((-0.4, 0))
        assert ports[1].location == pytest.approx((0.4, 0))
        for port in ports:
            assert port.region1.bounds.contains(port.x, port.y)
            assert port.region2.bounds.contains(port.x, port.y)

    def test_distant_pad_ignored(self):
        """Test pads of other jumpers do not connect."""
        jumpers = [
            JumperPlacement("a", (0, 0), "horizontal", ((-0.625, 0), (0.625, 0))),
            JumperPlacement("b", (3, 0), "horizontal", ((2.375, 0), (3.625, 0))),
        ]
        regions = create_jumper_regions(jumpers, "horizontal", 0.9, 1.0)
        pads = [r for r in regions if r.is_pad]
        bridges = [r for r in regions if r.is_bridge]
        ports = create_bridge_ports(pads, bridges)
        assert len(ports) == 4
        for port in ports:
            assert port.region1.region_id[0] == port.region2.region_id[0]


class TestBuildTopology:
    """Tests for build_topology."""

    def test_port_order_and_index(self, pad_layout):
        """Test port kinds are ordered and the index is bidirectional."""
        free, pad = pad_layout
        topology = build_topology(free + [pad], 0.5)

        prefixes = [p.port_id.split("_")[0] for p in topology.ports]
        assert prefixes == sorted(prefixes, key=["tp", "jp", "jip"].index)
        assert prefixes.count("jp") == 3

        for port in topology.ports:
            for region_id in port.region_ids:
                assert topology.region_ports[region_id].count(port.port_id) == 1
        total_refs = sum(len(ids) for ids in topology.region_ports.values())
        assert total_refs == 2 * len(topology.ports)

    def test_ports_for_region(self, pad_layout):
        """Test resolving the index back to ports."""
        free, pad = pad_layout
        topology = build_topology(free + [pad], 0.5)
        pad_ports = topology.ports_for_region("pad")
        assert len(pad_ports) == 3
        assert all(pad in (p.region1, p.region2) for p in pad_ports)
        assert topology.ports_for_region("missing") == []

    def test_lookup_region_ports(self, pad_layout):
        """Test the shared lookup resolves ids in index order."""
        free, pad = pad_layout
        topology = build_topology(free + [pad], 0.5)
        ports = lookup_region_ports(topology.ports, topology.region_ports, "pad")
        assert [p.port_id for p in ports] == topology.region_ports["pad"]
        assert lookup_region_ports(topology.ports, {}, "pad") == []

    def test_ports_on_shared_boundaries(self, pad_layout):
        """Test every port lies on a shared boundary of its regions."""
        free, pad = pad_layout
        topology = build_topology(free + [pad], 0.3)
        assert topology.ports
        for port in topology.ports:
            assert on_shared_boundary(port)

    def test_every_region_indexed(self, two_rectangles):
        """Test regions without ports still appear in the index."""
        regions = create_free_space_regions(two_rectangles + [[(20, 20), (21, 20), (21, 21), (20, 21)]])
        topology = build_topology(regions, 0.5)
        assert topology.region_ports["top_2"] == []

    def test_region_port_index_helper(self, two_rectangles):
        """Test index construction from a port list."""
        regions = create_free_space_regions(two_rectangles)
        ports = create_free_space_ports(regions, 1.0)
        index = build_region_port_index(regions, ports)
        assert index == {"top_0": ["tp_0"], "top_1": ["tp_0"]}

    def test_port_coordinates_finite(self, pad_layout):
        """Test all port coordinates are finite numbers."""
        free, pad = pad_layout
        for port in build_topology(free + [pad], 0.25).ports:
            assert math.isfinite(port.x) and math.isfinite(port.y)
