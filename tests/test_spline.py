# tests/test_spline.py
# Catmull-Rom -> Bezier conversion: matrices, endpoint skipping, post-processing

import numpy as np
import pytest

from hairforge.config import ConversionConfig
from hairforge.cyhair import Strand
from hairforge.spline import (
    CATMULL_ROM_TO_BEZIER,
    CATMULL_ROM_TO_BEZIER_END,
    CATMULL_ROM_TO_BEZIER_START,
    catmull_rom_to_bezier,
    convert_strand,
    segment_matrix,
    stack_curves,
    strand_curve_count,
)


def _strand(points, thickness=None, index=0) -> Strand:
    return Strand(index=index, points=np.asarray(points, dtype=np.float32), thickness=thickness)


def _wiggly(n: int, seed: int = 3) -> np.ndarray:
    gen = np.random.default_rng(seed)
    pts = np.cumsum(gen.uniform(-1.0, 1.0, size=(n, 3)), axis=0)
    return pts.astype(np.float32)


NO_SWAP = ConversionConfig(swap_yz=False)


@pytest.mark.geometry
@pytest.mark.parametrize("matrix", [CATMULL_ROM_TO_BEZIER, CATMULL_ROM_TO_BEZIER_START, CATMULL_ROM_TO_BEZIER_END])
def test_matrix_rows_sum_to_one(matrix) -> None:
    np.testing.assert_allclose(matrix.sum(axis=1), np.ones(4))


def test_segment_matrix_selection() -> None:
    assert segment_matrix(2, 0) is None
    assert segment_matrix(5, 0) is CATMULL_ROM_TO_BEZIER_START
    assert segment_matrix(5, 1) is CATMULL_ROM_TO_BEZIER
    assert segment_matrix(5, 2) is CATMULL_ROM_TO_BEZIER
    assert segment_matrix(5, 3) is CATMULL_ROM_TO_BEZIER_END
    assert segment_matrix(3, 0) is CATMULL_ROM_TO_BEZIER_START
    assert segment_matrix(3, 1) is CATMULL_ROM_TO_BEZIER_END


@pytest.mark.geometry
def test_two_point_polygon_is_straight() -> None:
    p0 = np.array([1.0, 2.0, 3.0])
    p1 = np.array([4.0, -2.0, 9.0])
    q = catmull_rom_to_bezier(np.stack([p0, p1]), 0)
    expected = np.stack([p0, p0 + (p1 - p0) / 3.0, p0 + 2.0 * (p1 - p0) / 3.0, p1])
    np.testing.assert_allclose(q, expected, rtol=1e-6, atol=1e-6)


@pytest.mark.geometry
def test_segments_interpolate_polygon_points() -> None:
    pts = _wiggly(6)
    for s in range(5):
        q = catmull_rom_to_bezier(pts, s)
        np.testing.assert_allclose(q[0], pts[s], atol=1e-6)
        np.testing.assert_allclose(q[3], pts[s + 1], atol=1e-6)


@pytest.mark.geometry
def test_boundary_matrices_use_zero_phantoms() -> None:
    pts = _wiggly(5).astype(np.float64)
    first = catmull_rom_to_bezier(pts, 0)
    expected_first = CATMULL_ROM_TO_BEZIER_START @ np.stack([np.zeros(3), pts[0], pts[1], pts[2]])
    np.testing.assert_allclose(first, expected_first, atol=1e-5)

    last = catmull_rom_to_bezier(pts, 3)
    expected_last = CATMULL_ROM_TO_BEZIER_END @ np.stack([pts[2], pts[3], pts[4], np.zeros(3)])
    np.testing.assert_allclose(last, expected_last, atol=1e-5)

    middle = catmull_rom_to_bezier(pts, 2)
    np.testing.assert_allclose(middle, CATMULL_ROM_TO_BEZIER @ pts[1:5], atol=1e-5)


def test_segment_index_out_of_range() -> None:
    pts = _wiggly(4)
    with pytest.raises(ValueError):
        catmull_rom_to_bezier(pts, 3)
    with pytest.raises(ValueError):
        catmull_rom_to_bezier(pts[:1], 0)


@pytest.mark.parametrize("n,expected", [(0, 0), (1, 0), (2, 1), (3, 0), (4, 1), (5, 2), (10, 7)])
def test_curve_counts(n, expected) -> None:
    curves = convert_strand(_strand(_wiggly(n) if n else np.zeros((0, 3))), NO_SWAP, 0.1)
    assert len(curves) == expected
    assert strand_curve_count(n) == expected


@pytest.mark.geometry
def test_two_point_strand_yields_one_straight_curve() -> None:
    p0 = np.array([0.0, 0.0, 0.0], dtype=np.float32)
    p1 = np.array([3.0, 6.0, -9.0], dtype=np.float32)
    curves = convert_strand(_strand([p0, p1]), NO_SWAP, 0.1)
    assert len(curves) == 1
    expected = np.stack([p0, p0 + (p1 - p0) / 3, p0 + 2 * (p1 - p0) / 3, p1])
    np.testing.assert_allclose(curves[0].points, expected, atol=1e-6)


@pytest.mark.geometry
def test_tip_dropped_and_boundaries_at_both_ends() -> None:
    pts = _wiggly(7)
    curves = convert_strand(_strand(pts), NO_SWAP, 0.1)
    polygon = pts[:-2].astype(np.float64)
    assert len(curves) == 4

    # curve j runs from strand vertex j to j+1
    for j, c in enumerate(curves):
        np.testing.assert_allclose(c.points[0], pts[j], atol=1e-5)
        np.testing.assert_allclose(c.points[3], pts[j + 1], atol=1e-5)

    start = CATMULL_ROM_TO_BEZIER_START @ np.stack([np.zeros(3), polygon[0], polygon[1], polygon[2]])
    end = CATMULL_ROM_TO_BEZIER_END @ np.stack([polygon[2], polygon[3], polygon[4], np.zeros(3)])
    np.testing.assert_allclose(curves[0].points, start, atol=1e-5)
    np.testing.assert_allclose(curves[-1].points, end, atol=1e-5)
    np.testing.assert_allclose(curves[1].points, CATMULL_ROM_TO_BEZIER @ polygon[0:4], atol=1e-5)


@pytest.mark.geometry
def test_first_curve_starts_at_root() -> None:
    pts = np.array([[0, 0, 0], [1, 0, 0], [2, 1, 0], [3, 1, 1], [4, 2, 1]], dtype=np.float32)
    curves = convert_strand(_strand(pts), NO_SWAP, 0.1)
    p = pts.astype(np.float64)
    assert len(curves) == 2

    first = CATMULL_ROM_TO_BEZIER_START @ np.stack([np.zeros(3), p[0], p[1], p[2]])
    last = CATMULL_ROM_TO_BEZIER_END @ np.stack([p[0], p[1], p[2], np.zeros(3)])
    np.testing.assert_allclose(curves[0].points, first, atol=1e-6)
    np.testing.assert_allclose(curves[0].points[0], [0.0, 0.0, 0.0])
    np.testing.assert_allclose(curves[1].points, last, atol=1e-6)
    np.testing.assert_allclose(curves[1].points[3], [2.0, 1.0, 0.0])


@pytest.mark.geometry
def test_adjacent_curves_are_c1_continuous() -> None:
    curves = convert_strand(_strand(_wiggly(9)), NO_SWAP, 0.1)
    for a, b in zip(curves, curves[1:]):
        np.testing.assert_allclose(a.points[3], b.points[0], atol=1e-5)
        np.testing.assert_allclose(a.points[3] - a.points[2], b.points[1] - b.points[0], atol=1e-5)


@pytest.mark.geometry
def test_yz_swap() -> None:
    pts = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]], dtype=np.float32)
    curves = convert_strand(_strand(pts), ConversionConfig(), 0.1)
    np.testing.assert_allclose(curves[0].points[0], [1.0, 3.0, 2.0])
    np.testing.assert_allclose(curves[0].points[3], [4.0, 6.0, 5.0])


@pytest.mark.geometry
def test_scale_then_translate_every_control_point() -> None:
    pts = _wiggly(8)
    base = convert_strand(_strand(pts), ConversionConfig(), 0.1)
    cfg = ConversionConfig(vertex_scale=(2.0, 0.5, -3.0), vertex_translate=(1.0, -4.0, 0.25))
    moved = convert_strand(_strand(pts), cfg, 0.1)

    scale = np.array(cfg.vertex_scale, dtype=np.float32)
    translate = np.array(cfg.vertex_translate, dtype=np.float32)
    assert len(base) == len(moved)
    for b, m in zip(base, moved):
        np.testing.assert_allclose(m.points, scale * b.points + translate, rtol=1e-5, atol=1e-5)


def test_user_thickness_overrides_every_radius() -> None:
    pts = _wiggly(6)
    curves = convert_strand(_strand(pts, thickness=np.ones(6, dtype=np.float32)), ConversionConfig(thickness=0.3), 0.1)
    radii = np.concatenate([c.radii for c in curves])
    np.testing.assert_allclose(radii, 0.3)


def test_default_thickness_when_no_override() -> None:
    curves = convert_strand(_strand(_wiggly(6)), ConversionConfig(thickness=-1.0), 0.07)
    radii = np.concatenate([c.radii for c in curves])
    np.testing.assert_allclose(radii, 0.07)
    assert curves[0].width0 == pytest.approx(0.07)
    assert curves[0].width1 == pytest.approx(0.07)


def test_point_thickness_interpolates_between_vertices() -> None:
    thickness = np.array([0.0, 0.3, 0.6, 0.9, 1.2], dtype=np.float32)
    cfg = ConversionConfig(use_point_thickness=True)
    curves = convert_strand(_strand(_wiggly(5), thickness=thickness), cfg, 0.1)
    assert len(curves) == 2
    np.testing.assert_allclose(curves[0].radii, [0.0, 0.1, 0.2, 0.3], atol=1e-6)
    np.testing.assert_allclose(curves[1].radii, [0.3, 0.4, 0.5, 0.6], atol=1e-6)


def test_stack_curves_shapes() -> None:
    curves = convert_strand(_strand(_wiggly(6)), NO_SWAP, 0.1)
    cps, radii = stack_curves(curves)
    assert cps.shape == (12, 3)
    assert radii.shape == (12,)
    empty_cps, empty_radii = stack_curves([])
    assert empty_cps.shape == (0, 3) and empty_radii.shape == (0,)
