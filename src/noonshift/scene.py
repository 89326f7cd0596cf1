"""
Scene geometry and rendering capability.

The controller describes what to draw with the immutable geometry
descriptors below and hands them to a ``Renderer``. Renderers own the
resulting objects until they are disposed. Every object belongs to a group;
a group carries one transform applied to all of its members, which is how the
equatorial plane and everything attached to it follow the obliquity.

Scene frame: the orbital plane is x-z, +y is "up".
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

import numpy as np
import plotly.graph_objects as go

from .config import config

logger = logging.getLogger(__name__)

WORLD = 'world'
TILTED = 'tilted'


# ========== GEOMETRY DESCRIPTORS ==========
@dataclass(frozen=True, eq=False)
class Polyline:
    """Open polyline through ``points`` (array of shape (n, 3))."""
    points: np.ndarray
    color: str
    width: float = 2.0
    opacity: float = 1.0
    name: Optional[str] = None


@dataclass(frozen=True, eq=False)
class Sphere:
    """
    Sphere of uniform ``color``.

    With ``light_direction`` set, the hemisphere facing that direction keeps
    ``color`` and the other one is drawn in ``night_color``.
    """
    center: Tuple[float, float, float]
    radius: float
    color: str
    opacity: float = 1.0
    name: Optional[str] = None
    light_direction: Optional[Tuple[float, float, float]] = None
    night_color: Optional[str] = None


@dataclass(frozen=True, eq=False)
class Disc:
    """Filled disc centered on the origin, lying in the x-z plane."""
    radius: float
    color: str
    opacity: float = 1.0
    segments: int = 64
    name: Optional[str] = None


@dataclass(frozen=True, eq=False)
class Arrow:
    origin: Tuple[float, float, float]
    direction: Tuple[float, float, float]
    length: float
    color: str
    name: Optional[str] = None


Geometry = Union[Polyline, Sphere, Disc, Arrow]


def rotation_z(angle: float) -> np.ndarray:
    """Rotation about the scene Z axis by ``angle`` [rad]."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [c, -s, 0],
        [s,  c, 0],
        [0,  0, 1]
    ])


def circle_points(radius: float, segments: int = 64) -> np.ndarray:
    """Closed circle in the x-z plane, ``segments + 1`` points."""
    u = np.linspace(0, 2 * np.pi, segments + 1)
    return np.column_stack([radius * np.cos(u), np.zeros_like(u),
                            radius * np.sin(u)])


def segment(end) -> np.ndarray:
    """Two-point polyline from the origin to ``end``."""
    return np.array([[0.0, 0.0, 0.0], np.asarray(end, dtype=float)])


# ========== RENDERING CAPABILITY ==========
class Renderer(ABC):
    """
    Capability the scene controller drives.

    Implementations construct renderable objects from geometry descriptors,
    release them on ``dispose`` and apply per-group transforms.
    """

    @abstractmethod
    def add(self, geometry: Geometry, group: str = WORLD) -> int:
        """Create a renderable object and return its handle."""

    @abstractmethod
    def dispose(self, handle: int) -> None:
        """Release an object. Unknown or already released handles raise KeyError."""

    @abstractmethod
    def set_group_transform(self, group: str, matrix: np.ndarray) -> None:
        """Set the 3x3 transform applied to every member of ``group``."""

    @abstractmethod
    def reset_camera(self) -> None:
        """Restore the default viewpoint."""


class PlotlyRenderer(Renderer):
    """
    In-memory renderer producing plotly figures.

    Objects are kept as descriptors and converted to plotly traces, with
    their group transform applied, each time ``figure()`` is called.
    """

    def __init__(self, title: str = 'Solar Noon vs Clock Noon'):
        self._title = title
        self._objects: Dict[int, Tuple[Geometry, str]] = {}
        self._transforms: Dict[str, np.ndarray] = {WORLD: np.eye(3)}
        self._next_handle = 1
        self._camera = self._default_camera()

    # ========== PROPERTY ACCESS ==========
    @property
    def live_count(self) -> int:
        """Number of objects created and not yet disposed."""
        return len(self._objects)

    @property
    def camera(self) -> dict:
        return dict(self._camera)

    def group_transform(self, group: str) -> np.ndarray:
        return self._transforms.get(group, np.eye(3)).copy()

    def objects(self, group: Optional[str] = None) -> Dict[int, Geometry]:
        """Live objects by handle, optionally restricted to one group."""
        return {handle: geometry
                for handle, (geometry, owner) in self._objects.items()
                if group is None or owner == group}

    # ========== CAPABILITY ==========
    def add(self, geometry: Geometry, group: str = WORLD) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._objects[handle] = (geometry, group)
        self._transforms.setdefault(group, np.eye(3))
        return handle

    def dispose(self, handle: int) -> None:
        if handle not in self._objects:
            raise KeyError(f"No live scene object with handle {handle}")
        del self._objects[handle]

    def set_group_transform(self, group: str, matrix: np.ndarray) -> None:
        matrix = np.asarray(matrix, dtype=float)
        if matrix.shape != (3, 3):
            raise ValueError(f"Group transform must be 3x3, got shape {matrix.shape}")
        self._transforms[group] = matrix.copy()

    def reset_camera(self) -> None:
        self._camera = self._default_camera()
        logger.debug("Camera reset to %s", self._camera['eye'])

    def set_camera(self, eye: Tuple[float, float, float]) -> None:
        """Move the camera eye, as an interactive orbit control would."""
        self._camera['eye'] = dict(x=eye[0], y=eye[1], z=eye[2])

    # ========== PLOTTING ==========
    def figure(self) -> go.Figure:
        """
        Build a plotly Figure of every live object.

        Returns:
            Plotly Figure object
        """
        fig = go.Figure()
        for geometry, group in self._objects.values():
            matrix = self._transforms.get(group, np.eye(3))
            for trace in self._to_traces(geometry, matrix):
                fig.add_trace(trace)

        limit = 1.1 * config.ECLIPTIC_RADIUS
        axis = dict(range=[-limit, limit], visible=False)
        fig.update_layout(
            scene=dict(
                xaxis=axis, yaxis=axis, zaxis=axis,
                aspectmode='cube',
                camera=self._camera,
            ),
            title=self._title,
            showlegend=False,
            margin=dict(l=0, r=0, t=40, b=0),
        )
        return fig

    def _to_traces(self, geometry: Geometry, matrix: np.ndarray) -> list:
        if isinstance(geometry, Polyline):
            pts = np.asarray(geometry.points, dtype=float) @ matrix.T
            return [go.Scatter3d(
                x=pts[:, 0], y=pts[:, 1], z=pts[:, 2],
                mode='lines',
                line=dict(color=geometry.color, width=geometry.width),
                opacity=geometry.opacity,
                name=geometry.name,
                hoverinfo='skip'
            )]
        if isinstance(geometry, Sphere):
            return [self._sphere_trace(geometry, matrix)]
        if isinstance(geometry, Disc):
            return [self._disc_trace(geometry, matrix)]
        if isinstance(geometry, Arrow):
            return self._arrow_traces(geometry, matrix)
        raise TypeError(f"Unsupported geometry type: {type(geometry).__name__}")

    def _sphere_trace(self, sphere: Sphere, matrix: np.ndarray) -> go.Surface:
        """Sphere surface at the transformed center."""
        u = np.linspace(0, 2 * np.pi, 30)
        v = np.linspace(0, np.pi, 20)
        center = matrix @ np.asarray(sphere.center, dtype=float)

        x = center[0] + sphere.radius * np.outer(np.cos(u), np.sin(v))
        y = center[1] + sphere.radius * np.outer(np.sin(u), np.sin(v))
        z = center[2] + sphere.radius * np.outer(np.ones(np.size(u)), np.cos(v))

        colorscale = [[0, sphere.color], [1, sphere.color]]
        surfacecolor = None
        if sphere.light_direction is not None:
            light = matrix @ np.asarray(sphere.light_direction, dtype=float)
            normals = np.stack([x - center[0], y - center[1], z - center[2]])
            # 1 on the lit hemisphere, 0 on the night side
            surfacecolor = (np.einsum('i,ijk->jk', light, normals) > 0).astype(float)
            night = sphere.night_color or sphere.color
            colorscale = [[0, night], [0.5, night], [0.5, sphere.color],
                          [1, sphere.color]]

        return go.Surface(
            x=x, y=y, z=z,
            surfacecolor=surfacecolor,
            colorscale=colorscale,
            cmin=0.0, cmax=1.0,
            showscale=False,
            opacity=sphere.opacity,
            name=sphere.name,
            hoverinfo='name'
        )

    def _disc_trace(self, disc: Disc, matrix: np.ndarray) -> go.Mesh3d:
        # triangle fan around the center vertex
        rim = circle_points(disc.radius, disc.segments)[:-1]
        pts = np.vstack([np.zeros(3), rim]) @ matrix.T
        n = len(rim)
        i = np.zeros(n, dtype=int)
        j = np.arange(1, n + 1)
        k = np.roll(j, -1)
        return go.Mesh3d(
            x=pts[:, 0], y=pts[:, 1], z=pts[:, 2],
            i=i, j=j, k=k,
            color=disc.color,
            opacity=disc.opacity,
            name=disc.name,
            hoverinfo='skip'
        )

    def _arrow_traces(self, arrow: Arrow, matrix: np.ndarray) -> list:
        origin = matrix @ np.asarray(arrow.origin, dtype=float)
        direction = matrix @ np.asarray(arrow.direction, dtype=float)
        direction = direction / np.linalg.norm(direction)
        vec = arrow.length * direction
        tip = origin + vec
        line = go.Scatter3d(
            x=[origin[0], tip[0]], y=[origin[1], tip[1]], z=[origin[2], tip[2]],
            mode='lines',
            line=dict(color=arrow.color, width=6),
            name=arrow.name,
            hoverinfo='skip'
        )
        cone = go.Cone(
            x=[tip[0]], y=[tip[1]], z=[tip[2]],
            u=[vec[0]], v=[vec[1]], w=[vec[2]],
            sizemode='absolute', sizeref=0.15 * arrow.length,
            anchor='tip',
            showscale=False,
            colorscale=[[0, arrow.color], [1, arrow.color]],
            name=arrow.name,
            hoverinfo='skip'
        )
        return [line, cone]

    @staticmethod
    def _default_camera() -> dict:
        eye = config.DEFAULT_CAMERA_EYE
        up = config.DEFAULT_CAMERA_UP
        return dict(
            eye=dict(x=eye[0], y=eye[1], z=eye[2]),
            up=dict(x=up[0], y=up[1], z=up[2]),
            center=dict(x=0, y=0, z=0),
        )

    def __repr__(self):
        groups = sorted(self._transforms)
        return f"PlotlyRenderer(live_count={self.live_count}, groups={groups})"
