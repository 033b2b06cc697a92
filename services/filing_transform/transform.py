"""Pure conversions of a filing between Domain Model, Wire Format and Tagged Format.

None of these functions perform I/O or raise on malformed input: missing or non-dict
sections degrade to empty sections, missing leaves to None.
"""

from typing import Any

from pydantic import BaseModel

from services.filing_transform.field_table import (
    FIELDS,
    SECTIONS,
    WIRE_REFERENCE_KEYS,
    FieldSpec,
    ItemKind,
    SectionSpec,
)


class TransformOptions(BaseModel):
    """
    Optional knobs for the transform functions.

    Attributes:
        null_sentinels: Source values that are read as None.
        logger:         Logger (or ColorLogger) receiving debug messages about dropped fields.
    """

    null_sentinels: tuple[Any, ...] = ("N/A",)
    logger: Any = None


DEFAULT_OPTIONS = TransformOptions()


##########################################
################ HELPERS #################
##########################################

def _get_path(source: Any, path: tuple[str, ...]) -> Any:
    current = source
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _set_path(target: dict, path: tuple[str, ...], value: Any) -> None:
    current = target
    for key in path[:-1]:
        current = current.setdefault(key, {})
    current[path[-1]] = value


def _read_leaf(section: Any, key: str, options: TransformOptions) -> Any:
    if not isinstance(section, dict):
        return None
    value = section.get(key)
    if isinstance(value, str) and value in options.null_sentinels:
        return None
    return value


def _skeleton(side: str) -> dict:
    target: dict = {}
    for section in SECTIONS:
        _set_path(target, getattr(section, f"{side}_path"), {})
    return target


def _section_present(section: SectionSpec, source_section: Any) -> bool:
    # an empty section carries no leaves and stays {}
    return section.container or (isinstance(source_section, dict) and bool(source_section))


def _translate(source: Any, source_side: str, target_side: str, options: TransformOptions, read_leaf=None) -> dict:
    """Copy every table leaf from one side of the table to the other."""
    read_leaf = read_leaf or (lambda section, key: _read_leaf(section, key, options))
    target = _skeleton(target_side)
    for section in SECTIONS:
        source_section = _get_path(source, getattr(section, f"{source_side}_path"))
        if not _section_present(section, source_section):
            continue
        for field in section.fields:
            source_key = getattr(field, f"{source_side}_path")[-1]
            _set_path(target, getattr(field, f"{target_side}_path"), read_leaf(source_section, source_key))
        if options.logger and isinstance(source_section, dict):
            _log_dropped(section, source_section, source_side, options.logger)
    return target


def _log_dropped(section: SectionSpec, source_section: dict, source_side: str, logger: Any) -> None:
    known = {getattr(field, f"{source_side}_path")[-1] for field in section.fields}
    path = getattr(section, f"{source_side}_path")
    # keys naming a subsection are not leaves of this section
    known.update(
        getattr(other, f"{source_side}_path")[-1]
        for other in SECTIONS
        if getattr(other, f"{source_side}_path")[:-1] == path
    )
    dropped = sorted(str(key) for key in source_section if key not in known)
    if dropped:
        logger.debug("Dropping %d fields outside the table in '%s': %s", len(dropped), ".".join(path), ", ".join(dropped))


##########################################
############ DOMAIN <-> WIRE #############
##########################################

def unwrap_wire_payload(payload: Any) -> dict:
    """
    Accepts a raw Wire Format payload or one of its envelopes.

    Args:
        payload (Any): Raw payload, a backend response ``{"data": ...}`` or an update
            envelope ``{"mapped_data": ...}``.

    Returns:
        dict: The Wire Format payload, or an empty dict for anything unusable.
    """
    if not isinstance(payload, dict):
        return {}
    for envelope_key in ("mapped_data", "data"):
        inner = payload.get(envelope_key)
        if isinstance(inner, dict):
            return inner
    return payload


def extract_references(wire: Any) -> dict:
    """Returns the opaque cross-reference fields (id, document, mapped_filing) present in a Wire payload."""
    wire = unwrap_wire_payload(wire)
    return {key: wire[key] for key in WIRE_REFERENCE_KEYS if key in wire}


def to_domain(wire: Any, options: TransformOptions | None = None) -> dict:
    """
    Converts a Wire Format payload into the Domain Model.

    Args:
        wire (Any): Wire payload, optionally wrapped in a ``data`` or ``mapped_data`` envelope.
        options (TransformOptions | None): Optional transform settings.

    Returns:
        dict: The Domain Model with every section present.
    """
    options = options or DEFAULT_OPTIONS
    return _translate(unwrap_wire_payload(wire), "wire", "domain", options)


def to_wire(domain: Any, references: dict | None = None, options: TransformOptions | None = None) -> dict:
    """
    Converts a Domain Model into the Wire Format.

    Args:
        domain (Any): The Domain Model.
        references (dict | None): Cross references (id, document, mapped_filing) carried over unchanged.
        options (TransformOptions | None): Optional transform settings.

    Returns:
        dict: The Wire Format payload. ``id`` is always present, None when not supplied.
    """
    options = options or DEFAULT_OPTIONS
    wire: dict = {"id": None}
    for key in WIRE_REFERENCE_KEYS:
        if references and key in references:
            wire[key] = references[key]
    wire.update(_translate(domain, "domain", "wire", options))
    return wire


def to_wire_request(domain: Any, references: dict | None = None, options: TransformOptions | None = None) -> dict:
    """Wraps ``to_wire`` in the ``{"mapped_data": ...}`` envelope the backend update endpoint expects."""
    return {"mapped_data": to_wire(domain, references=references, options=options)}


##########################################
############# TAGGED FORMAT ##############
##########################################

def _tag_envelope(field: FieldSpec, value: Any) -> dict | None:
    if value is None:
        return None
    is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
    return {
        "value": value,
        "numeric_value": value if is_number else None,
        "string_value": value if isinstance(value, str) and field.kind != ItemKind.DATE else None,
        "boolean_value": value if isinstance(value, bool) else None,
        "date_value": value if isinstance(value, str) and field.kind == ItemKind.DATE else None,
        "tags": [
            {
                "prefix": field.prefix,
                "element_name": field.element_name,
                "element_id": field.element_id,
                "abstract": False,
                "data_type": field.kind.data_type,
                "balance_type": field.balance_type.value if field.balance_type else None,
                "period_type": field.period_type.value,
                "substitution_group": "xbrli:item",
                "description": field.description,
            }
        ],
    }


def to_tagged(wire: Any, options: TransformOptions | None = None) -> dict:
    """
    Annotates every leaf of a Wire Format payload with its taxonomy metadata.

    Null leaves stay a literal None instead of an envelope. Cross references are copied unchanged.

    Args:
        wire (Any): Wire payload, optionally wrapped in an envelope.
        options (TransformOptions | None): Optional transform settings.

    Returns:
        dict: The Tagged Format payload, shaped like the Wire Format.
    """
    options = options or DEFAULT_OPTIONS
    source = unwrap_wire_payload(wire)
    tagged: dict = dict(extract_references(source))
    tagged.update(_skeleton("wire"))
    for section in SECTIONS:
        source_section = _get_path(source, section.wire_path)
        if not _section_present(section, source_section):
            continue
        for field in section.fields:
            _set_path(tagged, field.wire_path, _tag_envelope(field, _read_leaf(source_section, field.wire_name, options)))
    return tagged


def from_tagged(tagged: Any, options: TransformOptions | None = None) -> dict:
    """Unwraps a Tagged Format payload back into the Wire Format, dropping tag metadata."""
    options = options or DEFAULT_OPTIONS

    def read_envelope(section: Any, key: str) -> Any:
        leaf = section.get(key) if isinstance(section, dict) else None
        if isinstance(leaf, dict):
            leaf = leaf.get("value")
        if isinstance(leaf, str) and leaf in options.null_sentinels:
            return None
        return leaf

    source = unwrap_wire_payload(tagged)
    wire: dict = {"id": None}
    wire.update(extract_references(source))
    wire.update(_translate(source, "wire", "wire", options, read_leaf=read_envelope))
    return wire


def count_filled_fields(domain: Any) -> int:
    """Number of table leaves that hold a value in a Domain Model."""
    return sum(1 for field in FIELDS if _get_path(domain, field.domain_path) is not None)
