"""Canonical JSON encoding of gene sequences.

Layout::

    {"version": 1, "genes": [{"type": "Emitter", "chemical": 0, ...}, ...]}

Decoding is strict: any structural mismatch raises ``GenomeDecodeError``.
"""

from __future__ import annotations

import dataclasses
import json
import math
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple, Type

from core.chem import CHEMICAL_COUNT, Chemical
from core.organism import MAX_LOCUS_VALUE
from genome.genes import (
    GENE_TYPES,
    REACTION_SHAPES,
    Brain,
    Emitter,
    Gene,
    InitialState,
    IoType,
    Reaction,
    ReactionShape,
    Receptor,
    ReceptorType,
    gene_tag,
)

FORMAT_VERSION = 1


class GenomeDecodeError(ValueError):
    """Stored genome text does not match the expected schema."""


def canonical_json(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


# --- encoding --------------------------------------------------------------


def _encode_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Chemical):
        return {"id": value.id, "concentration": value.concentration}
    if isinstance(value, ReactionShape):
        return {"shape": value.shape, "chemicals": [_encode_value(c) for c in value.chemicals]}
    if isinstance(value, tuple):
        return [_encode_value(v) for v in value]
    return value


def encode_gene(gene: Gene) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"type": gene_tag(gene)}
    for f in dataclasses.fields(gene):
        payload[f.name] = _encode_value(getattr(gene, f.name))
    return payload


def encode_genes(genes: Sequence[Gene]) -> str:
    return canonical_json({"version": FORMAT_VERSION, "genes": [encode_gene(g) for g in genes]})


# --- decoding --------------------------------------------------------------

Decoder = Callable[[Any, str], Any]


def _int_in(low: int, high: int) -> Decoder:
    def decode(value: Any, where: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise GenomeDecodeError(f"{where}: expected integer, got {value!r}")
        if not low <= value <= high:
            raise GenomeDecodeError(f"{where}: {value} outside [{low}, {high}]")
        return value

    return decode


def _non_negative_int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise GenomeDecodeError(f"{where}: expected non-negative integer, got {value!r}")
    return value


def _float(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise GenomeDecodeError(f"{where}: expected number, got {value!r}")
    try:
        number = float(value)
    except OverflowError as exc:
        raise GenomeDecodeError(f"{where}: number out of range") from exc
    if not math.isfinite(number):
        raise GenomeDecodeError(f"{where}: expected finite number, got {value!r}")
    return number


def _bool(value: Any, where: str) -> bool:
    if not isinstance(value, bool):
        raise GenomeDecodeError(f"{where}: expected boolean, got {value!r}")
    return value


def _enum(enum_type: Type[Enum]) -> Decoder:
    def decode(value: Any, where: str) -> Enum:
        try:
            return enum_type(value)
        except (ValueError, TypeError) as exc:
            raise GenomeDecodeError(f"{where}: unknown {enum_type.__name__} {value!r}") from exc

    return decode


def _optional(inner: Decoder) -> Decoder:
    def decode(value: Any, where: str) -> Any:
        return None if value is None else inner(value, where)

    return decode


def _object(value: Any, where: str, keys: Sequence[str]) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise GenomeDecodeError(f"{where}: expected object, got {type(value).__name__}")
    if set(value) != set(keys):
        raise GenomeDecodeError(f"{where}: expected keys {sorted(keys)}, got {sorted(value)}")
    return value


_chemical_id = _int_in(0, CHEMICAL_COUNT - 1)
_locus_id = _int_in(0, MAX_LOCUS_VALUE)
_locus_value = _int_in(0, MAX_LOCUS_VALUE)


def _chemical(value: Any, where: str) -> Chemical:
    data = _object(value, where, ("id", "concentration"))
    return Chemical(_chemical_id(data["id"], f"{where}.id"), _float(data["concentration"], f"{where}.concentration"))


def _reaction_shape(value: Any, where: str) -> ReactionShape:
    data = _object(value, where, ("shape", "chemicals"))
    shape_cls = REACTION_SHAPES.get(data["shape"]) if isinstance(data["shape"], str) else None
    if shape_cls is None:
        raise GenomeDecodeError(f"{where}: unknown reaction shape {data['shape']!r}")
    chemicals = data["chemicals"]
    arity = len(dataclasses.fields(shape_cls))
    if not isinstance(chemicals, list) or len(chemicals) != arity:
        raise GenomeDecodeError(f"{where}: {data['shape']} takes exactly {arity} chemicals")
    return shape_cls(*(_chemical(c, f"{where}.chemicals[{i}]") for i, c in enumerate(chemicals)))


def _weights(value: Any, where: str) -> Tuple[float, ...]:
    if not isinstance(value, list):
        raise GenomeDecodeError(f"{where}: expected list of numbers")
    return tuple(_float(w, f"{where}[{i}]") for i, w in enumerate(value))


FIELD_DECODERS: Dict[Type, Dict[str, Decoder]] = {
    InitialState: {"species": _chemical_id, "concentration": _float},
    Emitter: {
        "chemical": _chemical_id,
        "gain": _float,
        "kind": _enum(IoType),
        "rate": _non_negative_int,
        "locus": _locus_id,
        "threshold": _locus_value,
        "invert": _bool,
        "clear_after_read": _bool,
    },
    Reaction: {"kind": _reaction_shape, "rate": _non_negative_int},
    Receptor: {
        "kind": _enum(ReceptorType),
        "chemical": _chemical_id,
        "gain": _float,
        "threshold": _float,
        "locus": _optional(_locus_id),
    },
    Brain: {
        "hidden_layer_count": _non_negative_int,
        "neurons_per_hidden_layer": _non_negative_int,
        "weights": _weights,
    },
}


def decode_gene(value: Any, where: str = "gene") -> Gene:
    if not isinstance(value, dict) or "type" not in value:
        raise GenomeDecodeError(f"{where}: expected object with a 'type' tag")
    tag = value["type"]
    gene_type = GENE_TYPES.get(tag) if isinstance(tag, str) else None
    if gene_type is None:
        raise GenomeDecodeError(f"{where}: unknown gene type {tag!r}")
    decoders = FIELD_DECODERS[gene_type]
    data = _object(value, where, ("type", *decoders))
    kwargs = {name: decode(data[name], f"{where}.{name}") for name, decode in decoders.items()}
    return gene_type(**kwargs)


def decode_genes(text: str) -> Tuple[Gene, ...]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GenomeDecodeError(f"Failed to decode genome: {exc}") from exc
    data = _object(payload, "genome", ("version", "genes"))
    if isinstance(data["version"], bool) or data["version"] != FORMAT_VERSION:
        raise GenomeDecodeError(f"Unsupported genome format version {data['version']!r}")
    genes: List[Any] = data["genes"]
    if not isinstance(genes, list):
        raise GenomeDecodeError("genome.genes: expected list")
    return tuple(decode_gene(g, f"genes[{i}]") for i, g in enumerate(genes))


__all__ = [
    "FORMAT_VERSION",
    "GenomeDecodeError",
    "canonical_json",
    "decode_gene",
    "decode_genes",
    "encode_gene",
    "encode_genes",
]
