import numpy as np
import pytest

from meshview.lod.manager import LODLevel, LODManager, LODMeshData, size_factor
from meshview.mesh.errors import InvalidFormat, MissingData


@pytest.mark.parametrize(
    "model_size, expected",
    [(0.5, 0.3), (1.0, 0.3), (3.0, 0.6), (5.0, 1.0), (8.0, 1.0), (20.0, 2.0)],
)
def test_size_factor(model_size, expected):
    assert size_factor(model_size) == pytest.approx(expected)


@pytest.fixture
def small_model(single_triangle):
    """Manager with every level present for a model of size 3."""
    levels = {
        level: LODMeshData(single_triangle, f"mesh-{level.value}", 1)
        for level in LODLevel
    }
    return LODManager(levels, np.zeros(3, dtype=np.float32), 3.0)


@pytest.mark.parametrize(
    "distance, expected",
    [(0.0, LODLevel.LOD0), (8.0, LODLevel.LOD0), (10.0, LODLevel.LOD1), (50.0, LODLevel.LOD2)],
)
def test_select_lod_by_distance(small_model, distance, expected):
    assert small_model.select_lod_by_distance(distance) == expected


def test_thresholds_scale_with_model_size(small_model):
    assert small_model.threshold(LODLevel.LOD0) == pytest.approx(9.0)
    assert small_model.threshold(LODLevel.LOD1) == pytest.approx(18.0)


def test_update_lod_reports_changes(small_model):
    assert small_model.update_lod(5.0) is False
    assert small_model.needs_update is False

    assert small_model.update_lod(50.0) is True
    assert small_model.current_lod == LODLevel.LOD2
    assert small_model.needs_update is True
    assert small_model.current_mesh_handle() == "mesh-2"

    small_model.mark_updated()
    assert small_model.needs_update is False
    assert small_model.update_lod(60.0) is False


def test_update_from_camera(small_model):
    assert small_model.update_from_camera((0.0, 0.0, 10.0)) is True
    assert small_model.current_lod == LODLevel.LOD1

    # moving the model next to the camera brings full detail back
    assert small_model.update_from_camera((0.0, 0.0, 10.0), model_offset=(0.0, 0.0, 9.0))
    assert small_model.current_lod == LODLevel.LOD0


def test_missing_levels_are_never_selected(single_triangle):
    levels = {
        LODLevel.LOD0: LODMeshData(single_triangle, None, 1),
        LODLevel.LOD2: LODMeshData(single_triangle, None, 1),
    }
    manager = LODManager(levels, np.zeros(3), 3.0)

    assert manager.select_lod_by_distance(10.0) == LODLevel.LOD2
    assert not manager.has_level(LODLevel.LOD1)
    assert manager.get(LODLevel.LOD1) is None


def test_only_full_detail_level(single_triangle):
    manager = LODManager({LODLevel.LOD0: LODMeshData(single_triangle, None, 1)}, np.zeros(3), 3.0)

    assert manager.select_lod_by_distance(1000.0) == LODLevel.LOD0


def test_full_detail_level_is_required(single_triangle):
    with pytest.raises(MissingData):
        LODManager({LODLevel.LOD1: LODMeshData(single_triangle, None, 1)}, np.zeros(3), 3.0)


def test_from_geometry_builds_every_level(quad_grid):
    manager = LODManager.from_geometry(
        quad_grid, mesh_factory=lambda g: ("mesh", g.triangle_count)
    )

    assert set(manager.levels) == set(LODLevel)
    lod0 = manager.get(LODLevel.LOD0)
    assert lod0.triangle_count == quad_grid.triangle_count
    assert lod0.mesh_handle == ("mesh", quad_grid.triangle_count)

    counts = [manager.get(level).triangle_count for level in LODLevel]
    assert counts[0] > counts[1] > 0
    assert counts[0] > counts[2] > 0
    assert manager.model_size == pytest.approx(np.hypot(5.0, 10.0))
    assert manager.current_geometry().triangle_count == quad_grid.triangle_count


def test_failed_levels_are_left_out(quad_grid, monkeypatch):
    def fail(geometry, ratio, settings):
        raise InvalidFormat("cannot simplify")

    monkeypatch.setattr("meshview.lod.manager.simplify_mesh", fail)

    manager = LODManager.from_geometry(quad_grid)

    assert list(manager.levels) == [LODLevel.LOD0]
    assert manager.select_lod_by_distance(500.0) == LODLevel.LOD0
    assert manager.current_mesh_handle() is None
