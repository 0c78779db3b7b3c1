"""Per-index lookup tables built when an Info object is finalized."""

from __future__ import annotations

import string
from collections import defaultdict
from collections.abc import Iterable

from matinfo.core.types import AtomData, IndexedAtomData
from matinfo.errors import LogicError


def _label_suffix(i: int) -> str:
    letters = string.ascii_lowercase
    out = ""
    i += 1
    while i > 0:
        i, rem = divmod(i - 1, len(letters))
        out = letters[rem] + out
    return out


def build_atom_data_table(atoms: Iterable[IndexedAtomData]) -> tuple[AtomData, ...]:
    """Map every AtomIndex to its AtomData. Indices must cover 0..N-1 without gaps."""

    by_index: dict[int, AtomData] = {}
    for iad in atoms:
        idx = iad.index.value
        known = by_index.get(idx)
        if known is None:
            by_index[idx] = iad.atom_data
        elif known is not iad.atom_data:
            raise LogicError(f"Atom index {idx} is associated with two different AtomData objects.")
    n = len(by_index)
    if sorted(by_index) != list(range(n)):
        raise LogicError("Atom indices must form the contiguous range 0..N-1.")
    return tuple(by_index[i] for i in range(n))


def build_display_labels(table: tuple[AtomData, ...]) -> tuple[str, ...]:
    """Labels per index, e.g. ``("Al-a", "O", "Al-b")`` when Al plays two roles."""

    indices_by_desc: dict[str, list[int]] = defaultdict(list)
    for idx, atom_data in enumerate(table):
        indices_by_desc[atom_data.description].append(idx)
    labels = [""] * len(table)
    for desc, indices in indices_by_desc.items():
        if len(indices) == 1:
            labels[indices[0]] = desc
            continue
        for i, idx in enumerate(indices):
            labels[idx] = f"{desc}-{_label_suffix(i)}"
    return tuple(labels)
