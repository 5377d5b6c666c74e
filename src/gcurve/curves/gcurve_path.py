"""
Path - ordered chain of curve primitives, each expected to start where the previous one ends.

The path owns its children. It is a collection rather than a primitive: it
has no fraction space of its own. Wrap it in CurveChainWithDistanceIndex to
evaluate it as a single curve.
"""

from __future__ import annotations

from typing import List, Optional

from gcurve.mathutils.vec3 import Vec3
from gcurve.curves.gcurve_primitive import CurvePrimitive
from gcurve.curves.gcurve_stroke_options import StrokeOptions


class Path:

    def __init__(self, *children: CurvePrimitive):
        self.children: List[CurvePrimitive] = []
        for child in children:
            self.try_add_child(child)

    @staticmethod
    def create_array(children) -> Path:
        return Path(*children)

    def __repr__(self):
        return f"Path({', '.join(repr(c) for c in self.children)})"

    def __len__(self):
        return len(self.children)

    def __iter__(self):
        return iter(self.children)

    def try_add_child(self, child: Optional[CurvePrimitive]) -> bool:
        """Append a primitive. None and non-primitives are refused."""
        if not isinstance(child, CurvePrimitive):
            return False
        self.children.append(child)
        return True

    @property
    def is_empty(self) -> bool:
        return not self.children

    def start_point(self) -> Optional[Vec3]:
        return self.children[0].start_point() if self.children else None

    def end_point(self) -> Optional[Vec3]:
        return self.children[-1].end_point() if self.children else None

    def curve_length(self) -> float:
        return sum(child.curve_length() for child in self.children)

    def emit_strokable_parts(self, handler, options: Optional[StrokeOptions] = None):
        for child in self.children:
            child.emit_strokable_parts(handler, options)

    def reverse_children_in_place(self):
        """Reverse child order and each child's direction."""
        for child in self.children:
            child.reverse_in_place()
        self.children.reverse()

    def clone(self) -> Path:
        return Path(*(child.clone() for child in self.children))

    def try_transform_in_place(self, matrix) -> bool:
        """Transform every child; False if any child refused (the others are still transformed)."""
        num_fail = 0
        for child in self.children:
            if not child.try_transform_in_place(matrix):
                num_fail += 1
        return num_fail == 0
