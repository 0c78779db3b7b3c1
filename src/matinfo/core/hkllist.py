"""Sorted reflection list with lookup of expanded Miller indices."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from matinfo.core.compute_once import ComputeOnce
from matinfo.core.types import HKLInfo
from matinfo.errors import BadInput, LogicError


HKL = tuple[int, int, int]


class HKLList(Sequence[HKLInfo]):
    """Immutable reflections ordered by (dspacing, h, k, l).

    ``dlower``/``dupper`` are the configured d-spacing window, independent of
    which reflections are actually stored. ``dmin_val``/``dmax_val`` are the
    extremes actually present, both ``inf`` for an empty list.
    """

    def __init__(self, records: Iterable[HKLInfo], dlower: float, dupper: float) -> None:
        if not 0.0 < dlower <= dupper:
            raise BadInput("HKL window must satisfy 0 < dlower <= dupper.")
        items = list(records)
        for hi in items:
            if not isinstance(hi, HKLInfo):
                raise BadInput("HKLList entries must be HKLInfo instances.")
        self._records: tuple[HKLInfo, ...] = tuple(sorted(items, key=lambda hi: hi.sort_key))
        self._dlower = float(dlower)
        self._dupper = float(dupper)
        self._eqv_index: ComputeOnce[dict[HKL, int]] = ComputeOnce(self._build_eqv_index)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, idx):
        return self._records[idx]

    def __iter__(self) -> Iterator[HKLInfo]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"HKLList(n={len(self)}, dlower={self._dlower:g}, dupper={self._dupper:g})"

    @property
    def dlower(self) -> float:
        return self._dlower

    @property
    def dupper(self) -> float:
        return self._dupper

    @property
    def dmin_val(self) -> float:
        return self._records[0].dspacing if self._records else float("inf")

    @property
    def dmax_val(self) -> float:
        return self._records[-1].dspacing if self._records else float("inf")

    def first(self) -> HKLInfo | None:
        return self._records[0] if self._records else None

    def last(self) -> HKLInfo | None:
        return self._records[-1] if self._records else None

    @property
    def has_demi_normals(self) -> bool:
        return bool(self._records) and self._records[0].demi_normals is not None

    @property
    def has_expanded_hkl(self) -> bool:
        return bool(self._records) and self._records[0].eqv_hkl is not None

    def _build_eqv_index(self) -> dict[HKL, int]:
        index: dict[HKL, int] = {}
        for pos, hi in enumerate(self._records):
            if hi.eqv_hkl is None:
                raise LogicError("Expanded HKL search requires eqv_hkl on every reflection.")
            for h, k, l in hi.eqv_hkl.tolist():
                index.setdefault((h, k, l), pos)
                index.setdefault((-h, -k, -l), pos)
        return index

    def search_expanded_hkl(self, h: int, k: int, l: int) -> HKLInfo | None:
        """Return the reflection whose equivalent indices contain (h,k,l) or (-h,-k,-l).

        Returns None when nothing matches, including when no expanded index data
        is present.
        """

        if not self.has_expanded_hkl:
            return None
        pos = self._eqv_index.get().get((int(h), int(k), int(l)))
        return None if pos is None else self._records[pos]
