"""Fixed data for one fitting run: sections of samples between critical points."""
from typing import List, Sequence

import numpy as np

from pbnvec.types import PreconditionError

# Variables follow the curve-fitting paper's notation (P, C, A, B) with
# 0-based indexes.


class SectionData:
    """
    Data points partitioned into sections at the critical points.

    Section ``i`` holds every sample from critical point ``i`` to critical
    point ``i + 1``, both ends included.
    """

    def __init__(self, sections: List[np.ndarray]):
        if not sections:
            raise PreconditionError("At least one section is required")
        self.sections = sections
        self.critical_points = np.array(
            [section[0] for section in sections] + [sections[-1][-1]],
            dtype=float,
        )

    @property
    def n(self) -> int:
        """The number of critical points."""
        return len(self.sections) + 1

    @property
    def section_count(self) -> int:
        return len(self.sections)

    @property
    def is_closed(self) -> bool:
        return self.n > 2 and np.array_equal(self.critical_points[0], self.critical_points[-1])

    def m(self, i: int) -> int:
        """The number of samples in section ``i``."""
        if i < 0 or i >= len(self.sections):
            raise PreconditionError(f'Invalid section number "{i}"')
        return len(self.sections[i])

    def P(self, i: int) -> np.ndarray:
        """Critical point ``i``."""
        if i < 0 or i >= self.n:
            raise PreconditionError(f'Invalid point number "{i}"')
        return self.critical_points[i]

    def C(self, i: int) -> np.ndarray:
        """Samples of section ``i``, shape (m_i, 2)."""
        if i < 0 or i >= len(self.sections):
            raise PreconditionError(f'Invalid section number "{i}"')
        return self.sections[i]

    def A(self, i: int, t: np.ndarray) -> np.ndarray:
        """
        The part of the section residual that does not depend on the tangents.

        P_i (B0 + B1) + P_{i+1} (B2 + B3) - C_i, evaluated at every sample.
        """
        b = bernstein(t)
        return (
            np.outer(b[:, 0] + b[:, 1], self.P(i))
            + np.outer(b[:, 2] + b[:, 3], self.P(i + 1))
            - self.C(i)
        )

    @classmethod
    def for_points(cls, data_points: Sequence, critical_points: Sequence) -> "SectionData":
        """
        Partition ``data_points`` at ``critical_points``.

        Raises:
            PreconditionError: If the critical points are not an ordered
                subsequence of the data points sharing its first and last point
        """
        data = [tuple(point) for point in data_points]
        critical = [tuple(point) for point in critical_points]
        if len(critical) < 2 or len(data) < 2:
            raise PreconditionError("Need at least two data points and two critical points")
        if data[0] != critical[0] or data[-1] != critical[-1]:
            raise PreconditionError("Critical points must be a subsequence of data points")

        sections = []
        section_start = 0
        next_critical = 1
        for index in range(1, len(data)):
            if next_critical < len(critical) and data[index] == critical[next_critical]:
                sections.append(np.array(data[section_start:index + 1], dtype=float))
                section_start = index
                next_critical += 1

        if next_critical != len(critical) or section_start != len(data) - 1:
            raise PreconditionError("Critical points must be a subsequence of data points")
        return cls(sections)


def bernstein(t) -> np.ndarray:
    """Cubic Bernstein basis at each ``t``, shape (len(t), 4)."""
    t = np.asarray(t, dtype=float)
    s = 1.0 - t
    return np.stack([s ** 3, 3 * s ** 2 * t, 3 * s * t ** 2, t ** 3], axis=-1)
