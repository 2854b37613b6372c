# scene.py
"""
The render host's scene container.

The scene holds the objects drawn each frame. The galaxy controller only
needs add() and remove(); the renderer walks points() every frame.
"""
import logging
from typing import List

from galaxy import PointCloud


class Scene:
    """An ordered collection of renderable objects."""
    def __init__(self):
        self.objects: List[object] = []

    def add(self, obj) -> None:
        """Adds `obj` to the scene. Adding an object already present does nothing."""
        if any(o is obj for o in self.objects):
            return
        if isinstance(obj, PointCloud) and obj.disposed:
            raise ValueError("Cannot add a disposed point cloud to the scene.")
        self.objects.append(obj)
        logging.debug(f"Scene: added {type(obj).__name__} ({len(self.objects)} objects).")

    def remove(self, obj) -> None:
        """Removes `obj` from the scene. Removing an absent object does nothing."""
        before = len(self.objects)
        self.objects = [o for o in self.objects if o is not obj]
        if len(self.objects) != before:
            logging.debug(f"Scene: removed {type(obj).__name__} ({len(self.objects)} objects).")

    def points(self) -> List[PointCloud]:
        """Returns the point clouds currently in the scene."""
        return [o for o in self.objects if isinstance(o, PointCloud)]

    def __contains__(self, obj) -> bool:
        return any(o is obj for o in self.objects)

    def __len__(self) -> int:
        return len(self.objects)
