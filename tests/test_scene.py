"""
Test suite for scene geometry and PlotlyRenderer.

Tests cover:
- Geometry helpers
- Object lifecycle (add / dispose / live count)
- Group transforms applied at figure time
- Trace types produced per geometry
- Camera reset
"""

import math

import numpy as np
import plotly.graph_objects as go
import pytest

from noonshift.scene import (
    TILTED, WORLD, Arrow, Disc, PlotlyRenderer, Polyline, Sphere,
    circle_points, rotation_z, segment,
)


class TestHelpers:

    def test_circle_points(self):
        pts = circle_points(2.0, 8)
        assert pts.shape == (9, 3)
        assert np.allclose(np.linalg.norm(pts, axis=1), 2.0)
        assert np.allclose(pts[:, 1], 0.0)
        assert np.allclose(pts[0], pts[-1])

    def test_rotation_z(self):
        R = rotation_z(math.pi / 2)
        assert np.allclose(R @ [1.0, 0.0, 0.0], [0.0, 1.0, 0.0])
        assert np.allclose(R @ [0.0, 0.0, 1.0], [0.0, 0.0, 1.0])

    def test_segment(self):
        assert np.allclose(segment([1.0, 2.0, 3.0]), [[0, 0, 0], [1, 2, 3]])


class TestLifecycle:

    @pytest.fixture
    def renderer(self):
        return PlotlyRenderer()

    def test_add_and_dispose(self, renderer):
        a = renderer.add(Sphere((0, 0, 0), 0.1, 'blue'))
        b = renderer.add(Polyline(segment([1, 0, 0]), 'red'), TILTED)
        assert a != b
        assert renderer.live_count == 2
        renderer.dispose(a)
        assert renderer.live_count == 1
        assert list(renderer.objects(TILTED)) == [b]
        assert renderer.objects(WORLD) == {}

    def test_double_dispose(self, renderer):
        handle = renderer.add(Sphere((0, 0, 0), 0.1, 'blue'))
        renderer.dispose(handle)
        with pytest.raises(KeyError):
            renderer.dispose(handle)

    def test_unknown_handle(self, renderer):
        with pytest.raises(KeyError):
            renderer.dispose(999)

    def test_bad_transform_shape(self, renderer):
        with pytest.raises(ValueError):
            renderer.set_group_transform(TILTED, np.eye(4))


class TestFigure:

    @pytest.fixture
    def renderer(self):
        return PlotlyRenderer()

    def test_trace_types(self, renderer):
        renderer.add(Polyline(circle_points(1.0, 16), 'black'))
        renderer.add(Sphere((0, 0, 0), 0.1, 'blue'))
        renderer.add(Disc(1.0, 'white', segments=16))
        renderer.add(Arrow((0, 0, 0), (0, 1, 0), 1.5, 'blue'))
        kinds = [type(trace) for trace in renderer.figure().data]
        assert kinds == [go.Scatter3d, go.Surface, go.Mesh3d, go.Scatter3d, go.Cone]

    def test_group_transform_applied(self, renderer):
        renderer.add(Polyline(segment([1.0, 0.0, 0.0]), 'red'), TILTED)
        renderer.add(Polyline(segment([1.0, 0.0, 0.0]), 'red'), WORLD)
        renderer.set_group_transform(TILTED, rotation_z(math.pi / 2))
        tilted, world = renderer.figure().data
        assert np.allclose([tilted.x[1], tilted.y[1], tilted.z[1]], [0.0, 1.0, 0.0])
        assert np.allclose([world.x[1], world.y[1], world.z[1]], [1.0, 0.0, 0.0])

    def test_arrow_follows_transform(self, renderer):
        renderer.add(Arrow((0, 0, 0), (0, 1, 0), 2.0, 'blue'), TILTED)
        angle = math.radians(30.0)
        renderer.set_group_transform(TILTED, rotation_z(angle))
        line, cone = renderer.figure().data
        assert np.allclose([line.x[1], line.y[1]],
                           [-2.0 * math.sin(angle), 2.0 * math.cos(angle)])
        assert isinstance(cone, go.Cone)

    def test_disposed_objects_not_drawn(self, renderer):
        handle = renderer.add(Sphere((0, 0, 0), 0.1, 'blue'))
        renderer.dispose(handle)
        assert len(renderer.figure().data) == 0

    def test_uniform_sphere(self, renderer):
        renderer.add(Sphere((0, 0, 0), 0.1, 'blue'))
        surface = renderer.figure().data[0]
        assert surface.surfacecolor is None

    def test_sphere_day_and_night_sides(self, renderer):
        renderer.add(Sphere((0, 0, 0), 1.0, 'blue', light_direction=(1.0, 0.0, 0.0),
                            night_color='navy'))
        surface = renderer.figure().data[0]
        x = np.asarray(surface.x)
        lit = np.asarray(surface.surfacecolor)
        assert np.all(lit[x > 1e-6] == 1.0)
        assert np.all(lit[x < -1e-6] == 0.0)
        assert surface.colorscale[0][1] == 'navy'
        assert surface.colorscale[-1][1] == 'blue'

    def test_light_direction_follows_transform(self, renderer):
        renderer.add(Sphere((0, 0, 0), 1.0, 'blue', light_direction=(1.0, 0.0, 0.0),
                            night_color='navy'), TILTED)
        renderer.set_group_transform(TILTED, rotation_z(math.pi / 2))
        surface = renderer.figure().data[0]
        y = np.asarray(surface.y)
        lit = np.asarray(surface.surfacecolor)
        assert np.all(lit[y > 1e-6] == 1.0)
        assert np.all(lit[y < -1e-6] == 0.0)

    def test_disc_mesh(self, renderer):
        renderer.add(Disc(1.0, 'white', segments=12))
        mesh = renderer.figure().data[0]
        assert len(mesh.x) == 13
        assert len(mesh.i) == 12


class TestCamera:

    def test_default_camera(self):
        renderer = PlotlyRenderer()
        assert renderer.camera['eye'] == dict(x=0.0, y=2.5, z=0.0)
        assert renderer.figure().layout.scene.camera.eye.y == 2.5

    def test_reset_camera(self):
        renderer = PlotlyRenderer()
        renderer.set_camera((1.0, 1.0, 1.0))
        assert renderer.camera['eye'] == dict(x=1.0, y=1.0, z=1.0)
        renderer.reset_camera()
        assert renderer.camera['eye'] == dict(x=0.0, y=2.5, z=0.0)
