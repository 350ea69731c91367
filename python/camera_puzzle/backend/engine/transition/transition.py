"""Time-based swap animation with a single in-flight transition."""

from __future__ import annotations

from dataclasses import dataclass


def ease_in_out_quad(t: float) -> float:
    return 2 * t * t if t < 0.5 else -1 + (4 - 2 * t) * t


@dataclass(frozen=True)
class Transition:
    a: int
    b: int
    start: float
    duration: float
    cosmetic: bool = False

    def progress(self, now: float) -> float:
        """Linear progress clamped to ``[0, 1]``."""
        if self.duration <= 0:
            return 1.0
        return min(max((now - self.start) / self.duration, 0.0), 1.0)

    def eased(self, now: float) -> float:
        return ease_in_out_quad(self.progress(now))


class TransitionEngine:
    """Owns the one swap animation that may be running."""

    def __init__(self) -> None:
        self.active: Transition | None = None

    @property
    def busy(self) -> bool:
        return self.active is not None

    def begin_swap(
        self,
        a: int,
        b: int,
        duration: float,
        now: float,
        cosmetic: bool = False,
    ) -> bool:
        """Start animating a swap of *a* and *b*.

        Returns False (and changes nothing) while another swap is running.
        """
        if self.active is not None:
            return False
        self.active = Transition(a, b, now, duration, cosmetic)
        return True

    def update(self, now: float) -> Transition | None:
        """Clear and return the transition once it has finished."""
        done = self.active
        if done is None or done.progress(now) < 1.0:
            return None
        self.active = None
        return done

    def cancel(self) -> None:
        self.active = None

    def positions(self, size: int, now: float) -> list[tuple[float, float]]:
        """Return the on-screen ``(col, row)`` of every grid position.

        Only the two positions of the active transition move; they travel
        towards each other's cell along the eased progress curve.
        """
        cells = [
            (float(i % size), float(i // size)) for i in range(size * size)
        ]
        t = self.active
        if t is None:
            return cells
        p = t.eased(now)
        (ca, ra), (cb, rb) = cells[t.a], cells[t.b]
        cells[t.a] = (ca + (cb - ca) * p, ra + (rb - ra) * p)
        cells[t.b] = (cb - (cb - ca) * p, rb - (rb - ra) * p)
        return cells
