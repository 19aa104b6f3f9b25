import numpy as np
import pytest

from eddygrid.grid_config import (
    GridConfig,
    GridError,
    LocalExtents,
    local_topography,
    read_topography,
    write_topography,
)
from eddygrid.topology import build_topology, build_world


def test_default_config_is_valid_and_single_cell():
    config = GridConfig()
    config.validate()
    assert (config.nx, config.ny, config.nz, config.nh) == (1, 1, 1, 0)
    assert config.coord_horiz_halos == 1


@pytest.mark.parametrize(
    "kwargs, name",
    [
        ({"nx": 0}, "Nx"),
        ({"nh": -1}, "Nh"),
        ({"d_xi": 0.0}, "d_xi"),
        ({"coord_horiz_halos": 2}, "coordHorizHalos"),
        ({"vertical_deform_switch": -1}, "verticalDeformSwitch"),
        ({"vertical_deform_factor": 1.5}, "verticalDeformFactor"),
        ({"vertical_deform_quad_coeff": -2.5}, "verticalDeformQuadCoeff"),
    ],
)
def test_validate_rejects_out_of_range(kwargs, name):
    with pytest.raises(GridError, match=name):
        GridConfig(**kwargs).validate()


def test_validate_reports_all_errors():
    with pytest.raises(GridError) as info:
        GridConfig(nx=0, ny=0).validate()
    assert "Nx" in str(info.value) and "Ny" in str(info.value)


def test_inverse_resolution():
    config = GridConfig(d_xi=4.0, d_eta=2.0, d_zeta=0.5)
    assert config.dx_inv * config.d_xi == pytest.approx(1.0)
    assert config.dy_inv * config.d_eta == pytest.approx(1.0)
    assert config.dz_inv * config.d_zeta == pytest.approx(1.0)


def test_local_extents_divides_domain():
    config = GridConfig(nx=8, ny=6, nz=5, nh=2)
    extents = config.local_extents(2, 3)
    assert extents == LocalExtents(nxp=4, nyp=2, nzp=5, nh=2)
    assert (extents.i_min, extents.i_max) == (2, 6)
    assert (extents.j_min, extents.j_max) == (2, 4)
    assert (extents.k_min, extents.k_max) == (2, 7)
    assert extents.shape_3d == (8, 6, 9)
    assert extents.shape_2d == (8, 6)


def test_local_extents_uneven_split_raises():
    with pytest.raises(GridError, match="numProcsX"):
        GridConfig(nx=7, ny=6).local_extents(2, 3)
    with pytest.raises(GridError, match="numProcsY"):
        GridConfig(nx=8, ny=7).local_extents(2, 3)


def test_topography_round_trip(tmp_path):
    topo = np.arange(12, dtype=np.float32).reshape(4, 3) * 1.5
    path = tmp_path / "topo.bin"
    write_topography(path, topo)
    back = read_topography(path, 4, 3)
    assert back.shape == (4, 3)
    np.testing.assert_array_equal(back, topo)


def test_read_transposes_x_fastest_layout(tmp_path):
    nx, ny = 3, 2
    file_values = np.array([10, 11, 12, 20, 21, 22], dtype=np.float32)
    path = tmp_path / "topo.bin"
    path.write_bytes(
        np.array([nx, ny], dtype="=i4").tobytes() + file_values.astype("=f4").tobytes()
    )
    topo = read_topography(path, nx, ny)
    assert topo[2, 0] == file_values[2]
    assert topo[0, 1] == file_values[3]
    assert topo[2, 1] == file_values[5]


def test_read_extent_mismatch_raises(tmp_path):
    path = tmp_path / "topo.bin"
    write_topography(path, np.zeros((4, 3)))
    with pytest.raises(GridError, match="extents"):
        read_topography(path, 3, 4)


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(GridError):
        read_topography(tmp_path / "absent.bin", 2, 2)


def test_read_truncated_file_raises(tmp_path):
    path = tmp_path / "topo.bin"
    path.write_bytes(np.array([2, 2], dtype="=i4").tobytes() + b"\x00" * 4)
    with pytest.raises(GridError):
        read_topography(path, 2, 2)


def test_write_rejects_non_2d(tmp_path):
    with pytest.raises(GridError):
        write_topography(tmp_path / "t.bin", np.zeros(4))


def test_local_topography_single_rank_clamps_halos():
    topo = np.arange(12, dtype=np.float32).reshape(4, 3)
    config = GridConfig(nx=4, ny=3, nz=2, nh=2)
    extents = config.local_extents(1, 1)
    local = local_topography(topo, build_topology(0, 1, 1), extents)
    assert local.shape == extents.shape_2d
    np.testing.assert_array_equal(local[2:6, 2:5], topo)
    np.testing.assert_array_equal(local[0, 2:5], topo[0])
    np.testing.assert_array_equal(local[-1, 2:5], topo[-1])
    assert local[0, 0] == topo[0, 0]
    assert local[-1, -1] == topo[-1, -1]


def test_local_topography_interior_halos_come_from_neighbours():
    topo = np.arange(32, dtype=np.float32).reshape(8, 4)
    config = GridConfig(nx=8, ny=4, nz=1, nh=1)
    extents = config.local_extents(2, 2)
    world = build_world(2, 2)
    locals_ = [local_topography(topo, t, extents) for t in world]
    # rank 0 high-x halo is the first column of rank 1's interior
    np.testing.assert_array_equal(locals_[0][-1, 1:-1], locals_[1][1, 1:-1])
    # rank 0 high-y halo is the first row of rank 2's interior
    np.testing.assert_array_equal(locals_[0][1:-1, -1], locals_[2][1:-1, 1])
    # rank 3 interior is the upper-right block of the global field
    np.testing.assert_array_equal(locals_[3][1:-1, 1:-1], topo[4:, 2:])


def test_local_topography_rejects_non_2d():
    extents = LocalExtents(nxp=1, nyp=1, nzp=1, nh=0)
    with pytest.raises(GridError):
        local_topography(np.zeros((2, 2, 2)), build_topology(0, 1, 1), extents)