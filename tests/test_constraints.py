import itertools

from habitat_layout.constraints import (
    rects_overlap,
    validate_layout,
    validate_placement,
    validate_reposition,
)
from habitat_layout.models import SurfaceBounds

from conftest import make_module


def test_unknown_type_is_rejected(bounds):
    result = validate_placement("reactor", (0, 0), [], bounds)
    assert not result.valid
    assert result.reason == "unknown-module-type"


def test_flush_with_edge_is_valid_and_one_past_is_not(bounds):
    # living quarters are 120 x 100
    assert validate_placement("living-quarters", (680, 500), [], bounds).valid
    over_x = validate_placement("living-quarters", (681, 0), [], bounds)
    over_y = validate_placement("living-quarters", (0, 501), [], bounds)
    assert over_x.reason == "out-of-bounds"
    assert over_y.reason == "out-of-bounds"


def test_negative_coordinates_are_out_of_bounds(bounds):
    assert validate_placement("power", (-1, 0), [], bounds).reason == "out-of-bounds"
    assert validate_placement("power", (0, -0.5), [], bounds).reason == "out-of-bounds"


def test_touching_edges_do_not_overlap(bounds):
    existing = [make_module(1, "living-quarters", 0, 0)]
    assert validate_placement("living-quarters", (120, 0), existing, bounds).valid
    assert validate_placement("living-quarters", (0, 100), existing, bounds).valid


def test_overlap_is_rejected(bounds):
    existing = [make_module(1, "living-quarters", 0, 0)]
    result = validate_placement("living-quarters", (119, 0), existing, bounds)
    assert not result.valid
    assert result.reason == "overlap"


def test_overlap_is_symmetric():
    rects = [
        (0, 0, 10, 10),
        (10, 0, 10, 10),
        (5, 5, 10, 10),
        (0, 10, 10, 10),
        (2, 2, 3, 3),
        (-5, -5, 6, 6),
        (20, 20, 1, 1),
    ]
    for a, b in itertools.product(rects, repeat=2):
        assert rects_overlap(a, b) == rects_overlap(b, a)


def test_containment_counts_as_overlap():
    assert rects_overlap((0, 0, 100, 100), (10, 10, 5, 5))


def test_unknown_existing_modules_have_no_footprint(bounds):
    existing = [make_module(1, "reactor", 0, 0)]
    assert validate_placement("power", (0, 0), existing, bounds).valid


def test_validity_ignores_insertion_order(bounds):
    existing = [
        make_module(1, "power", 0, 0),
        make_module(2, "airlock", 300, 300),
        make_module(3, "storage", 500, 0),
    ]
    for order in itertools.permutations(existing):
        assert validate_placement("airlock", (310, 310), list(order), bounds).reason == "overlap"
        assert validate_placement("airlock", (100, 0), list(order), bounds).valid


def test_reposition_excludes_the_moved_module(bounds):
    module = make_module(1, "living-quarters", 0, 0)
    others = [module, make_module(2, "power", 300, 0)]
    assert validate_reposition(module, (10, 10), others, bounds).valid
    assert validate_reposition(module, (250, 0), others, bounds).reason == "overlap"


def test_validate_layout_reports_every_problem():
    modules = [
        make_module(1, "power", 0, 0),
        make_module(2, "power", 50, 50),
        make_module(3, "airlock", 150, 150),
        make_module(4, "reactor", 0, 0),
    ]
    result = validate_layout(modules, SurfaceBounds(width=200, height=200))
    assert not result.passed
    assert result.overlaps == [(1, 2)]
    assert result.out_of_bounds == [3]
    assert result.unknown_types == [4]
    assert "overlap_1_2" in result.failed_rules


def test_validate_layout_passes_clean_layout(bounds):
    modules = [make_module(1, "power", 0, 0), make_module(2, "airlock", 100, 0)]
    result = validate_layout(modules, bounds)
    assert result.passed, result.failed_rules
