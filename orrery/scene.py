"""
Minimal scene graph.

Only what the precision core needs: nodes with a translation, an Euler rotation
(XYZ order, radians) and a uniform scale, parented into a tree, plus a camera.
The renderer walks the tree; nothing here reads transforms back as state.
"""
import numpy as np


def euler_to_matrix(rotation):
    """3x3 matrix for XYZ Euler angles (radians)."""
    rx, ry, rz = rotation
    cx, sx = np.cos(rx), np.sin(rx)
    cy, sy = np.cos(ry), np.sin(ry)
    cz, sz = np.cos(rz), np.sin(rz)
    Rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    Ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    Rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]])
    return Rx @ Ry @ Rz


class SceneNode:
    def __init__(self, name, parent=None):
        self.name = name
        self.position = np.zeros(3)
        self.rotation = np.zeros(3)
        self.scale = 1.0
        self.visible = True
        self.children = []
        self.parent = None
        if parent is not None:
            parent.add(self)

    def add(self, child):
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def local_matrix(self):
        m = np.eye(4)
        m[:3, :3] = euler_to_matrix(self.rotation) * self.scale
        m[:3, 3] = self.position
        return m

    def world_matrix(self):
        if self.parent is None:
            return self.local_matrix()
        return self.parent.world_matrix() @ self.local_matrix()

    def world_position(self):
        return self.world_matrix()[:3, 3].copy()

    def is_visible(self):
        node = self
        while node is not None:
            if not node.visible:
                return False
            node = node.parent
        return True

    def walk(self):
        yield self
        for child in self.children:
            yield from child.walk()

    def __repr__(self):
        return f"SceneNode({self.name!r}, position={np.round(self.position, 4).tolist()})"


class Camera:
    """Perspective camera. Position is in live render space."""

    def __init__(self, fov=45.0, near=1e-4, far=1e7, position=None):
        self.fov = fov
        self.near = near
        self.far = far
        self.position = np.zeros(3) if position is None else np.asarray(position, dtype=float)
        self.target = np.zeros(3)
        self.up = np.array([0.0, 1.0, 0.0])

    def look_at(self, target):
        self.target = np.asarray(target, dtype=float).copy()

    def view_basis(self):
        """(right, up, forward) unit vectors; forward points at the target."""
        forward = self.target - self.position
        norm = np.linalg.norm(forward)
        forward = np.array([0.0, 0.0, -1.0]) if norm == 0 else forward / norm
        right = np.cross(forward, self.up)
        if np.linalg.norm(right) < 1e-9:
            right = np.array([1.0, 0.0, 0.0])
        right /= np.linalg.norm(right)
        up = np.cross(right, forward)
        return right, up, forward


def build_scene():
    """root (virtual-origin translation) -> frame (reference-plane rotation) -> bodies."""
    root = SceneNode("root")
    frame = SceneNode("frame", parent=root)
    return root, frame
