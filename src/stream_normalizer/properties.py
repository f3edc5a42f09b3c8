"""Unicode scalar property table used by the normalization core.

The table answers the per-scalar questions the algorithms need: combining
class, one-level canonical and compatibility decomposition mappings, the
canonical composition pair mapping, composition exclusion, quick-check values
and assigned status.

Data is derived from the interpreter's Unicode Character Database and stored in
flat numpy arrays: per-scalar ``uint8`` arrays for combining class and flags,
and sorted key/offset/data arenas for the decomposition and composition
mappings, queried by binary search. Hangul syllables are handled arithmetically.
"""

from __future__ import annotations

import logging
import unicodedata
import zipfile
from functools import lru_cache
from pathlib import Path
from typing import Protocol

import numpy as np

from stream_normalizer.config import CACHE_TABLES, TABLE_CACHE_PATH, ensure_data_dirs
from stream_normalizer.models import NormalizationForm, QuickCheck, ScalarProperties
from stream_normalizer.telemetry import log_event, timed_event

logger = logging.getLogger(__name__)

MAX_SCALAR = 0x10FFFF
TABLE_SIZE = MAX_SCALAR + 1
TABLE_FORMAT = 1

# Hangul syllables for modern Korean
SBASE = 0xAC00
LBASE = 0x1100
VBASE = 0x1161
TBASE = 0x11A7
LCOUNT = 19
VCOUNT = 21
TCOUNT = 28
NCOUNT = VCOUNT * TCOUNT
SCOUNT = LCOUNT * NCOUNT
SLAST = SBASE + SCOUNT - 1

_ASSIGNED = 0x01
_EXCLUDED = 0x02
_NFD_NO = 0x04
_NFKD_NO = 0x08
_NFC_NO = 0x10
_NFC_MAYBE = 0x20
_NFKC_NO = 0x40
_NFKC_MAYBE = 0x80

_PAIR_SHIFT = 21


class PropertyTableError(RuntimeError):
    """Raised when the Unicode property data violates a normalization invariant."""


class PropertyTable(Protocol):
    """Read-only scalar property lookup consumed by the normalization core."""

    unicode_version: str

    def combining_class(self, scalar: int) -> int: ...

    def canonical_decomposition(self, scalar: int) -> tuple[int, ...]: ...

    def compatibility_decomposition(self, scalar: int) -> tuple[int, ...]: ...

    def is_composition_excluded(self, scalar: int) -> bool: ...

    def primary_composite(self, first: int, second: int) -> int | None: ...

    def quick_check(self, scalar: int, form: NormalizationForm) -> QuickCheck: ...

    def is_assigned(self, scalar: int) -> bool: ...

    def lookup(self, scalar: int) -> ScalarProperties: ...


def is_hangul_syllable(scalar: int) -> bool:
    return SBASE <= scalar <= SLAST


def _decompose_hangul_syllable(scalar: int) -> tuple[int, ...]:
    # One-level mapping: LVT syllables map to (LV, T) and LV syllables to (L, V).
    sindex = scalar - SBASE
    tindex = sindex % TCOUNT
    if tindex:
        return (scalar - tindex, TBASE + tindex)
    return (LBASE + sindex // NCOUNT, VBASE + (sindex % NCOUNT) // TCOUNT)


def _compose_hangul(first: int, second: int) -> int | None:
    if LBASE <= first < LBASE + LCOUNT and VBASE <= second < VBASE + VCOUNT:
        return SBASE + ((first - LBASE) * VCOUNT + (second - VBASE)) * TCOUNT
    if (
        SBASE <= first <= SLAST
        and (first - SBASE) % TCOUNT == 0
        and TBASE < second < TBASE + TCOUNT
    ):
        return first + (second - TBASE)
    return None


def _parse_decomposition(raw: str) -> tuple[bool, tuple[int, ...]]:
    parts = raw.split()
    compatibility = bool(parts) and parts[0].startswith("<")
    if compatibility:
        parts = parts[1:]
    return compatibility, tuple(int(part, 16) for part in parts)


def _pack_mappings(mappings: dict[int, tuple[int, ...]]) -> dict[str, np.ndarray]:
    keys = sorted(mappings)
    offsets = np.zeros(len(keys) + 1, dtype=np.uint32)
    data: list[int] = []
    for index, key in enumerate(keys):
        data.extend(mappings[key])
        offsets[index + 1] = len(data)
    return {
        "keys": np.asarray(keys, dtype=np.uint32),
        "offsets": offsets,
        "data": np.asarray(data, dtype=np.uint32),
    }


def build_arrays() -> dict[str, np.ndarray]:
    """Derive every table array from the running interpreter's UCD."""
    ccc = np.zeros(TABLE_SIZE, dtype=np.uint8)
    flags = np.zeros(TABLE_SIZE, dtype=np.uint8)
    canonical: dict[int, tuple[int, ...]] = {}
    compatibility: dict[int, tuple[int, ...]] = {}

    for scalar in range(TABLE_SIZE):
        char = chr(scalar)
        if unicodedata.category(char) == "Cn":
            continue
        flags[scalar] |= _ASSIGNED
        ccc[scalar] = unicodedata.combining(char)
        raw = unicodedata.decomposition(char)
        if not raw:
            continue
        is_compat, mapping = _parse_decomposition(raw)
        compatibility[scalar] = mapping
        if not is_compat:
            canonical[scalar] = mapping

    pairs: dict[tuple[int, int], int] = {}
    for scalar, mapping in canonical.items():
        char = chr(scalar)
        excluded = len(mapping) == 1 or unicodedata.normalize("NFC", char) != char
        if excluded:
            flags[scalar] |= _EXCLUDED | _NFC_NO
        if len(mapping) != 2:
            continue
        pair = (mapping[0], mapping[1])
        existing = pairs.get(pair)
        if existing is None:
            pairs[pair] = scalar
            continue
        existing_excluded = bool(flags[existing] & _EXCLUDED)
        if not excluded and not existing_excluded:
            raise PropertyTableError(
                f"pair U+{pair[0]:04X} U+{pair[1]:04X} composes to both "
                f"U+{existing:04X} and U+{scalar:04X}"
            )
        if existing_excluded and not excluded:
            pairs[pair] = scalar

    for scalar in canonical:
        flags[scalar] |= _NFD_NO
    for scalar in compatibility:
        flags[scalar] |= _NFKD_NO
        char = chr(scalar)
        if unicodedata.normalize("NFKC", char) != char:
            flags[scalar] |= _NFKC_NO

    flags[SBASE : SLAST + 1] |= _NFD_NO | _NFKD_NO
    second_elements = {
        second for (_, second), composite in pairs.items() if not flags[composite] & _EXCLUDED
    }
    second_elements.update(range(VBASE, VBASE + VCOUNT))
    second_elements.update(range(TBASE + 1, TBASE + TCOUNT))
    for scalar in second_elements:
        flags[scalar] |= _NFC_MAYBE
        if not flags[scalar] & _NFKC_NO:
            flags[scalar] |= _NFKC_MAYBE

    pair_items = sorted(
        ((first << _PAIR_SHIFT) | second, composite)
        for (first, second), composite in pairs.items()
    )
    canonical_arrays = _pack_mappings(canonical)
    compat_arrays = _pack_mappings(compatibility)
    return {
        "format": np.asarray(TABLE_FORMAT, dtype=np.uint32),
        "version": np.asarray(unicodedata.unidata_version),
        "ccc": ccc,
        "flags": flags,
        "canonical_keys": canonical_arrays["keys"],
        "canonical_offsets": canonical_arrays["offsets"],
        "canonical_data": canonical_arrays["data"],
        "compat_keys": compat_arrays["keys"],
        "compat_offsets": compat_arrays["offsets"],
        "compat_data": compat_arrays["data"],
        "pair_keys": np.asarray([key for key, _ in pair_items], dtype=np.uint64),
        "pair_values": np.asarray([value for _, value in pair_items], dtype=np.uint32),
    }


class UnicodeDataTable:
    """Flat, numpy-backed implementation of :class:`PropertyTable`."""

    _ARRAY_NAMES = (
        "ccc",
        "flags",
        "canonical_keys",
        "canonical_offsets",
        "canonical_data",
        "compat_keys",
        "compat_offsets",
        "compat_data",
        "pair_keys",
        "pair_values",
    )

    def __init__(self, arrays: dict[str, np.ndarray]) -> None:
        missing = [name for name in self._ARRAY_NAMES if name not in arrays]
        if missing:
            raise PropertyTableError(f"property table is missing arrays: {missing}")
        self.unicode_version = str(arrays["version"])
        self._arrays = {name: arrays[name] for name in self._ARRAY_NAMES}
        self._ccc = memoryview(self._arrays["ccc"])
        self._flags = memoryview(self._arrays["flags"])
        self._canonical = (
            self._arrays["canonical_keys"],
            self._arrays["canonical_offsets"],
            self._arrays["canonical_data"],
        )
        self._compat = (
            self._arrays["compat_keys"],
            self._arrays["compat_offsets"],
            self._arrays["compat_data"],
        )
        self._pair_keys = self._arrays["pair_keys"]
        self._pair_values = self._arrays["pair_values"]

    @classmethod
    def build(cls) -> UnicodeDataTable:
        with timed_event(logger, "table_build") as fields:
            arrays = build_arrays()
            table = cls(arrays)
            fields.update(
                unicode_version=table.unicode_version,
                canonical_mappings=int(arrays["canonical_keys"].size),
                compat_mappings=int(arrays["compat_keys"].size),
                composition_pairs=int(arrays["pair_keys"].size),
            )
        return table

    @classmethod
    def load(cls, path: Path) -> UnicodeDataTable:
        with np.load(path, allow_pickle=False) as data:
            arrays = {name: data[name] for name in data.files}
        if int(arrays.get("format", -1)) != TABLE_FORMAT:
            raise PropertyTableError(f"unsupported table format in {path}")
        if str(arrays.get("version")) != unicodedata.unidata_version:
            raise PropertyTableError(
                f"table {path} was built for Unicode {arrays.get('version')}, "
                f"runtime is {unicodedata.unidata_version}"
            )
        return cls(arrays)

    @classmethod
    def load_or_build(cls, path: Path) -> UnicodeDataTable:
        if path.exists():
            try:
                table = cls.load(path)
            except (OSError, KeyError, ValueError, zipfile.BadZipFile, PropertyTableError) as exc:
                logger.warning(
                    "table_cache_invalid",
                    extra={"event": "table_cache_invalid", "path": str(path), "error": str(exc)},
                )
            else:
                log_event(logger, "table_cache_hit", path=str(path))
                return table
        table = cls.build()
        table.save(path)
        return table

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        with tmp_path.open("wb") as handle:
            np.savez_compressed(
                handle,
                format=np.asarray(TABLE_FORMAT, dtype=np.uint32),
                version=np.asarray(self.unicode_version),
                **self._arrays,
            )
        tmp_path.replace(path)
        return path

    def sizes(self) -> dict[str, int]:
        return {name: int(array.nbytes) for name, array in self._arrays.items()}

    def combining_class(self, scalar: int) -> int:
        return self._ccc[scalar]

    def is_assigned(self, scalar: int) -> bool:
        return bool(self._flags[scalar] & _ASSIGNED)

    def is_composition_excluded(self, scalar: int) -> bool:
        return bool(self._flags[scalar] & _EXCLUDED)

    def canonical_decomposition(self, scalar: int) -> tuple[int, ...]:
        if not self._flags[scalar] & _NFD_NO:
            return ()
        if is_hangul_syllable(scalar):
            return _decompose_hangul_syllable(scalar)
        return _search_mapping(self._canonical, scalar)

    def compatibility_decomposition(self, scalar: int) -> tuple[int, ...]:
        if not self._flags[scalar] & _NFKD_NO:
            return ()
        if is_hangul_syllable(scalar):
            return _decompose_hangul_syllable(scalar)
        return _search_mapping(self._compat, scalar)

    def decomposition(self, scalar: int, form: NormalizationForm) -> tuple[int, ...]:
        if form.compatibility:
            return self.compatibility_decomposition(scalar)
        return self.canonical_decomposition(scalar)

    def primary_composite(self, first: int, second: int) -> int | None:
        hangul = _compose_hangul(first, second)
        if hangul is not None:
            return hangul
        key = (first << _PAIR_SHIFT) | second
        index = int(np.searchsorted(self._pair_keys, np.uint64(key)))
        if index < self._pair_keys.size and int(self._pair_keys[index]) == key:
            return int(self._pair_values[index])
        return None

    def quick_check(self, scalar: int, form: NormalizationForm) -> QuickCheck:
        flags = self._flags[scalar]
        if form is NormalizationForm.NFD:
            return QuickCheck.NO if flags & _NFD_NO else QuickCheck.YES
        if form is NormalizationForm.NFKD:
            return QuickCheck.NO if flags & _NFKD_NO else QuickCheck.YES
        if form is NormalizationForm.NFC:
            no, maybe = _NFC_NO, _NFC_MAYBE
        else:
            no, maybe = _NFKC_NO, _NFKC_MAYBE
        if flags & no:
            return QuickCheck.NO
        if flags & maybe:
            return QuickCheck.MAYBE
        return QuickCheck.YES

    def lookup(self, scalar: int) -> ScalarProperties:
        check_scalar(scalar)
        return ScalarProperties(
            scalar=scalar,
            combining_class=self.combining_class(scalar),
            canonical_decomposition=self.canonical_decomposition(scalar),
            compatibility_decomposition=self.compatibility_decomposition(scalar),
            composition_excluded=self.is_composition_excluded(scalar),
            quick_check={form: self.quick_check(scalar, form) for form in NormalizationForm},
            assigned=self.is_assigned(scalar),
        )


def check_scalar(scalar: int) -> int:
    """Return ``scalar`` unchanged, or raise ``ValueError`` if it is not a code point."""
    if not 0 <= scalar <= MAX_SCALAR:
        raise ValueError(f"scalar out of range: {scalar!r}")
    return scalar


def _search_mapping(
    arena: tuple[np.ndarray, np.ndarray, np.ndarray], scalar: int
) -> tuple[int, ...]:
    keys, offsets, data = arena
    index = int(np.searchsorted(keys, scalar))
    if index >= keys.size or int(keys[index]) != scalar:
        return ()
    return tuple(int(value) for value in data[offsets[index] : offsets[index + 1]])


@lru_cache(maxsize=1)
def default_table() -> UnicodeDataTable:
    """Process-wide table; persisted to ``TABLE_CACHE_PATH`` when caching is on."""
    if CACHE_TABLES:
        ensure_data_dirs()
        return UnicodeDataTable.load_or_build(TABLE_CACHE_PATH)
    return UnicodeDataTable.build()


def resolve_table(table: PropertyTable | None) -> PropertyTable:
    return table if table is not None else default_table()
