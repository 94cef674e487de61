import itertools

import pytest

from gradesnap.models import Region, ScaleRatios
from gradesnap.regions import find_answer_regions, find_name_regions
from gradesnap.template import DEFAULT_TEMPLATE

UNIT = ScaleRatios(1.0, 1.0)
FULL_SHAPE = (int(DEFAULT_TEMPLATE.frame_height), int(DEFAULT_TEMPLATE.frame_width))


def test_first_answer_region_uses_template_offsets():
    regions = find_answer_regions((0.0, 0.0), ScaleRatios(0.5, 0.25), 1)
    assert regions == [Region(x=77, y=111, width=112, height=17)]


def test_answer_regions_follow_ul():
    shifted = find_answer_regions((10.0, 20.0), UNIT, 3)
    base = find_answer_regions((0.0, 0.0), UNIT, 3)
    for a, b in zip(shifted, base):
        assert (a.x - b.x, a.y - b.y) == (10, 20)


@pytest.mark.parametrize("n", [1, 10, 25, 26, 50, 75, 100])
def test_answer_regions_count_and_no_overlap(n):
    regions = find_answer_regions((0.0, 0.0), UNIT, n)
    assert len(regions) == n
    for a, b in itertools.combinations(regions, 2):
        assert not a.overlaps(b)
    assert all(r.fits(FULL_SHAPE) for r in regions)


def test_answer_regions_break_columns():
    t = DEFAULT_TEMPLATE
    regions = find_answer_regions((0.0, 0.0), UNIT, 100)
    first = regions[0]
    for q in range(1, 25):
        assert regions[q].x == first.x
        assert regions[q].y > regions[q - 1].y
    for column, q in enumerate((25, 50, 75), start=1):
        assert regions[q].y == first.y
        assert regions[q].x == int(t.answer_origin[0] + column * t.answer_dx)


def test_answer_regions_past_last_column_leave_the_sheet():
    regions = find_answer_regions((0.0, 0.0), UNIT, 130)
    assert not all(r.fits(FULL_SHAPE) for r in regions)


def test_name_regions_layout():
    t = DEFAULT_TEMPLATE
    regions = find_name_regions((0.0, 0.0), UNIT)
    assert len(regions) == t.name_cells
    assert all(r.y == int(t.name_origin[1]) for r in regions)
    assert all(r.fits(FULL_SHAPE) for r in regions)

    gaps = [b.x - a.x for a, b in zip(regions, regions[1:])]
    mi = t.name_mi_index
    # Huecos irregulares antes y después de la inicial
    assert gaps[mi - 1] == pytest.approx(t.name_first_to_mi_dx, abs=1)
    assert gaps[mi] == pytest.approx(t.name_mi_to_last_dx, abs=1)
    for i, gap in enumerate(gaps):
        if i not in (mi - 1, mi):
            assert gap == pytest.approx(t.name_dx, abs=1)

    for a, b in itertools.combinations(regions, 2):
        assert not a.overlaps(b)


def test_name_regions_scale_with_ratios():
    regions = find_name_regions((0.0, 0.0), ScaleRatios(0.5, 0.5))
    assert regions[0] == Region(x=702, y=216, width=20, height=1131)
